from contextlib import contextmanager

from fastapi import HTTPException

from nexus.core.errors import (
    DispatchError,
    GenerationError,
    PayloadError,
    PayloadErrorKind,
)
from nexus.shared import Logger

__all__ = ["request_error_handler"]

logger = Logger(__name__).get_logger()

_PAYLOAD_TITLES = {
    PayloadErrorKind.DECODE_FAILURE: "Decryption/Decoding Error",
    PayloadErrorKind.MISSING_COMMAND: "Bad Request",
}


@contextmanager
def request_error_handler(stacklevel=1):
    """Translate pipeline failures into client-visible HTTP errors."""
    # Go 3 levels up to escape @contextmanager methods and current function
    stack_level = 2 + stacklevel
    kw = {"stacklevel": stack_level}
    try:
        yield

    except HTTPException:
        raise

    except PayloadError as e:
        logger.warning("Rejected payload (%s): %s", e.kind, e.message, **kw)
        raise HTTPException(
            status_code=400,
            detail={"error": _PAYLOAD_TITLES[e.kind], "message": e.message},
        ) from e

    except DispatchError as e:
        logger.warning("Rejected command (%s): %s", e.kind, e.message, **kw)
        raise HTTPException(
            status_code=400, detail={"error": "Bad Request", "message": e.message}
        ) from e

    except GenerationError as e:
        logger.error("Generation failed: %s", e, **kw)
        raise HTTPException(
            status_code=502, detail={"error": "Bad Gateway", "message": str(e)}
        ) from e

    except Exception as e:
        logger.error("Failed to process request: %s", e, **kw)
        raise HTTPException(
            status_code=500,
            detail={"error": "Internal Server Error", "message": str(e)},
        ) from e

from functools import cache
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from nexus.core import CommandDispatcher, GeminiGenerator, PayloadCodec, TextGenerator
from nexus.models import AiResponse
from nexus.shared import Logger, load_config
from nexus.shared.http import request_error_handler

logger = Logger(__name__).get_logger()

router = APIRouter()

config = load_config()

if config.crypto.passphrase is None:
    logger.warning(
        "ENCRYPTION_PASSPHRASE is not set. Payloads will only be base64-decoded."
    )


# Built at import so key derivation never runs inside a request
codec = PayloadCodec(
    passphrase=config.crypto.passphrase,
    salt=config.crypto.salt,
    iterations=config.crypto.iterations,
)


def get_codec() -> PayloadCodec:
    return codec


@cache
def get_dispatcher() -> CommandDispatcher:
    return CommandDispatcher(model=config.generation.model)


def get_generator() -> TextGenerator:
    if not config.generation.api_key:
        logger.error("GEMINI_API_KEY environment variable is not set.")
        raise HTTPException(
            status_code=500,
            detail={"error": "Server configuration error", "message": "API key not found."},
        )
    return GeminiGenerator(
        api_key=config.generation.api_key,
        base_url=config.generation.base_url,
        timeout=config.generation.timeout,
    )


@router.get("/proxy-gemini", response_model=AiResponse, response_model_by_alias=True)
async def proxy_gemini(
    codec: Annotated[PayloadCodec, Depends(get_codec)],
    dispatcher: Annotated[CommandDispatcher, Depends(get_dispatcher)],
    generator: Annotated[TextGenerator, Depends(get_generator)],
    nexus_ai: str | None = None,
):
    """
    Run the AI command carried by a scanned QR code.

    Query parameters:
    - nexus_ai: URL-safe base64 command, AES-GCM encrypted when the server
      has a passphrase configured
    """
    if not nexus_ai:
        raise HTTPException(
            status_code=400,
            detail={"error": "Bad Request", "message": "Missing nexus_ai query parameter."},
        )

    with request_error_handler():
        command = codec.decode(nexus_ai)
        prompt = dispatcher.dispatch(command)
        logger.info("Dispatching %s to %s", command.command, prompt.model)
        text = await generator.generate(prompt.model, prompt.prompt_text)

    return AiResponse(ai_response=text)

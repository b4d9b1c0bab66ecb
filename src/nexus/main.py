import argparse

from fastapi import (
    FastAPI,
)
from fastapi.middleware.cors import CORSMiddleware

from nexus.routers import get_routers
from nexus.shared import Logger, load_config

logger = Logger(__name__).get_logger()

config = load_config()


# ================================================================================
#       FastAPI Setup
# ================================================================================
app = FastAPI()

for router in get_routers():
    app.include_router(router)

origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ================================================================================
#       Command Line
# ================================================================================
def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the AI command proxy")
    parser.add_argument("--host", type=str, default=config.network.host)
    parser.add_argument("--port", type=int, default=config.network.port)
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=config.network.reload,
        help="Restart on source changes",
    )
    return parser.parse_args(argv)


def welcome(host, port):
    # Log server banner
    for line in config.general.title.split("\n"):
        logger.info(line)

    mode = "encrypted" if config.crypto.passphrase else "plain"
    logger.info("Starting AI command proxy on %s:%s (%s payloads)", host, port, mode)


def main(argv=None):
    args = parse_args(argv)
    welcome(args.host, args.port)

    import uvicorn

    uvicorn.run(
        "nexus.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()

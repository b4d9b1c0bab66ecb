# encode_payload.py
import argparse
import json

from nexus.core import PayloadCodec
from nexus.models import DecodedCommand
from nexus.shared import load_config

config = load_config()


def build_transport(command: DecodedCommand, passphrase: str | None) -> str:
    codec = PayloadCodec(
        passphrase=passphrase,
        salt=config.crypto.salt,
        iterations=config.crypto.iterations,
    )
    return codec.encode(command)


def parse_params(items: list[str]) -> dict[str, str]:
    """Turn repeated ``KEY=VALUE`` options into a parameter mapping."""
    parameters = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"--param expects KEY=VALUE, got {item!r}")
        parameters[key] = value
    return parameters


def build_parser():
    parser = argparse.ArgumentParser(
        description="Build the nexus_ai value a QR code would carry"
    )
    parser.add_argument("command", type=str, help="Command name, e.g. product-info")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Command parameter (repeatable)",
    )
    parser.add_argument("--context", type=str, help="Client context as a JSON object")
    parser.add_argument(
        "--passphrase",
        type=str,
        default=config.crypto.passphrase,
        help="Encrypt with this passphrase (default: ENCRYPTION_PASSPHRASE)",
    )
    parser.add_argument(
        "--plain", action="store_true", help="Skip encryption even if a passphrase is set"
    )
    parser.add_argument(
        "--url", type=str, help="Print a full link using this proxy URL instead"
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        parameters = parse_params(args.param)
        context = json.loads(args.context) if args.context else {}
    except ValueError as e:
        parser.error(str(e))

    if not isinstance(context, dict):
        parser.error("--context must be a JSON object")

    command = DecodedCommand(
        command=args.command,
        parameters=parameters,
        client_context=context,
    )
    transport = build_transport(command, None if args.plain else args.passphrase)

    if args.url:
        print(f"{args.url}?nexus_ai={transport}")
    else:
        print(transport)


if __name__ == "__main__":
    main()

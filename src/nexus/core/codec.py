"""Transport codec for QR-borne AI commands.

A transport string is URL-safe base64 over one of two blobs:

- plain: the UTF-8 JSON command itself
- encrypted: ``iv (12 bytes) || AES-256-GCM ciphertext || tag (16 bytes)``,
  keyed with PBKDF2-HMAC-SHA256 over the configured passphrase

Nothing in the string says which one it is. When a passphrase is configured the
codec tries the encrypted reading first and falls back to the plain one, so
older plain QR codes keep working on an encrypted deployment.
"""

import base64
import binascii
import json
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import ValidationError

from nexus.core.errors import PayloadError, PayloadErrorKind
from nexus.models import DecodedCommand
from nexus.shared import Logger

logger = Logger(__name__).get_logger()

DEFAULT_SALT = "ai-qr-nexus-salt"
DEFAULT_ITERATIONS = 100_000
KEY_LENGTH = 32
IV_LENGTH = 12
TAG_LENGTH = 16


class _DecryptFailed(Exception):
    pass


def derive_key(
    passphrase: str,
    salt: str = DEFAULT_SALT,
    iterations: int = DEFAULT_ITERATIONS,
) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def b64url_to_bytes(transport: str) -> bytes:
    """Decode URL-safe base64, tolerating missing padding."""
    normalised = transport.strip().replace("-", "+").replace("_", "/")
    normalised += "=" * (-len(normalised) % 4)
    return base64.b64decode(normalised, validate=True)


def bytes_to_b64url(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii").replace("+", "-").replace("/", "_")


def _parse_record(raw: bytes) -> dict:
    try:
        record = json.loads(raw.decode("utf-8"))
    except RecursionError as e:
        raise ValueError("JSON nested too deeply") from e
    if not isinstance(record, dict):
        raise ValueError(f"expected a JSON object, got {type(record).__name__}")
    return record


class PayloadCodec:
    """Turns ``nexus_ai`` transport strings into validated commands and back.

    ``passphrase`` is process configuration. ``None`` puts the codec in
    plain-decode-only mode for its whole lifetime.
    """

    def __init__(
        self,
        passphrase: str | None = None,
        salt: str = DEFAULT_SALT,
        iterations: int = DEFAULT_ITERATIONS,
    ):
        self.passphrase = passphrase or None
        self.salt = salt
        self.iterations = iterations

        self._aead: AESGCM | None = None
        if self.passphrase is not None:
            # PBKDF2 is slow on purpose; derive once, before any request arrives
            logger.debug("Deriving payload key (%s iterations).", iterations)
            self._aead = AESGCM(derive_key(self.passphrase, salt, iterations))

    @property
    def encrypted(self) -> bool:
        return self.passphrase is not None

    # ------------------------------------------------------------------
    #       Decoding
    # ------------------------------------------------------------------
    def decode(self, transport: str) -> DecodedCommand:
        if not transport:
            raise PayloadError(PayloadErrorKind.DECODE_FAILURE, "Payload is empty.")

        try:
            blob = b64url_to_bytes(transport)
        except (binascii.Error, ValueError) as e:
            logger.warning("Payload is not valid base64: %s", e)
            raise PayloadError(
                PayloadErrorKind.DECODE_FAILURE,
                "Could not decode AI command payload. Malformed Base64 data.",
            ) from e

        record = None
        if self.encrypted:
            try:
                record = self._decrypt(blob)
                logger.info("Payload decrypted successfully.")
            except _DecryptFailed as e:
                logger.warning(
                    "Decryption failed (%s); falling back to plain decoding.", e
                )

        if record is None:
            record = self._decode_plain(blob)

        return self._validate(record)

    def _decrypt(self, blob: bytes) -> dict:
        if len(blob) < IV_LENGTH + TAG_LENGTH:
            raise _DecryptFailed(f"blob too short ({len(blob)} bytes)")

        iv, ciphertext = blob[:IV_LENGTH], blob[IV_LENGTH:]
        try:
            plaintext = self._aead.decrypt(iv, ciphertext, None)
        except InvalidTag as e:
            raise _DecryptFailed("authentication tag mismatch") from e

        try:
            return _parse_record(plaintext)
        except ValueError as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            raise _DecryptFailed(f"decrypted data is not a command: {e}") from e

    def _decode_plain(self, blob: bytes) -> dict:
        try:
            record = _parse_record(blob)
        except ValueError as e:
            logger.warning("Payload could not be decoded as plain JSON: %s", e)
            message = (
                "Could not decrypt or decode AI command payload. "
                "Invalid passphrase or data format."
                if self.encrypted
                else "Could not decode AI command payload. Malformed Base64 data."
            )
            raise PayloadError(PayloadErrorKind.DECODE_FAILURE, message) from e

        if self.encrypted:
            logger.info("Payload interpreted as non-encrypted base64.")
        else:
            logger.info("Payload interpreted as non-encrypted base64 (no passphrase set).")
        return record

    def _validate(self, record: dict) -> DecodedCommand:
        if not record.get("cmd"):
            raise PayloadError(
                PayloadErrorKind.MISSING_COMMAND,
                "AI command (cmd) is missing from payload.",
            )

        try:
            return DecodedCommand.model_validate(record)
        except ValidationError as e:
            logger.warning("Decoded payload has an invalid shape: %s", e)
            raise PayloadError(
                PayloadErrorKind.DECODE_FAILURE,
                f"Invalid AI command payload: {e.error_count()} field error(s).",
            ) from e

    # ------------------------------------------------------------------
    #       Encoding
    # ------------------------------------------------------------------
    def encode(self, command: DecodedCommand) -> str:
        """Build the transport string a QR code would carry for ``command``."""
        plaintext = json.dumps(command.to_wire(), separators=(",", ":")).encode("utf-8")

        if not self.encrypted:
            return bytes_to_b64url(plaintext)

        iv = os.urandom(IV_LENGTH)
        return bytes_to_b64url(iv + self._aead.encrypt(iv, plaintext, None))

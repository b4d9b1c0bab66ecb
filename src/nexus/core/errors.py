from enum import StrEnum


class NexusError(Exception):
    """Base class for every failure the command pipeline reports to callers."""


class PayloadErrorKind(StrEnum):
    DECODE_FAILURE = "decode_failure"
    MISSING_COMMAND = "missing_command"


class PayloadError(NexusError):
    """The transport string could not be turned into a command."""

    def __init__(self, kind: PayloadErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class DispatchErrorKind(StrEnum):
    UNKNOWN_COMMAND = "unknown_command"


class DispatchError(NexusError):
    """A decoded command has no prompt strategy."""

    def __init__(self, kind: DispatchErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class GenerationError(NexusError):
    """The text-generation service failed or returned something unusable."""

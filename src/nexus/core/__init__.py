# Command pipeline: transport codec, prompt dispatch and the generation seam.
# Nothing here performs request handling; see nexus.routers for that.
from .codec import PayloadCodec
from .dispatcher import CommandDispatcher, CommandKind
from .errors import (
    DispatchError,
    DispatchErrorKind,
    GenerationError,
    NexusError,
    PayloadError,
    PayloadErrorKind,
)
from .generation import GeminiGenerator, TextGenerator

__all__ = [
    "CommandDispatcher",
    "CommandKind",
    "DispatchError",
    "DispatchErrorKind",
    "GeminiGenerator",
    "GenerationError",
    "NexusError",
    "PayloadCodec",
    "PayloadError",
    "PayloadErrorKind",
    "TextGenerator",
]

from .command import ClientContext, Coordinates, DecodedCommand, LocationError, PromptSpec
from .responses import AiResponse
from .serde_base import SerdeBase

__all__ = [
    "AiResponse",
    "ClientContext",
    "Coordinates",
    "DecodedCommand",
    "LocationError",
    "PromptSpec",
    "SerdeBase",
]

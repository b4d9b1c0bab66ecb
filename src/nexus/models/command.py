from typing import Any

from pydantic import Field, field_validator

from .serde_base import SerdeBase


class Coordinates(SerdeBase):
    latitude: float
    longitude: float


class LocationError(SerdeBase):
    error: str  # Reason the client could not read its position


class ClientContext(SerdeBase):
    location: Coordinates | LocationError | None = None
    device: dict[str, Any] | None = None
    timestamp: str | None = None
    locale: str | None = None

    @field_validator("location", mode="before")
    @classmethod
    def drop_unrecognised_location(cls, value):
        # Browsers send partial objects when geolocation is half-denied
        if not isinstance(value, dict):
            return value
        if value.get("latitude") is not None and value.get("longitude") is not None:
            return value
        if value.get("error"):
            return {"error": value["error"]}
        return None


class DecodedCommand(SerdeBase):
    command: str = Field(alias="cmd", min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict, alias="prm")
    client_context: ClientContext = Field(default_factory=ClientContext, alias="context")

    @field_validator("parameters", mode="before")
    @classmethod
    def null_parameters(cls, value):
        return {} if value is None else value

    @field_validator("client_context", mode="before")
    @classmethod
    def null_context(cls, value):
        return {} if value is None else value


class PromptSpec(SerdeBase):
    model: str
    prompt_text: str

"""Prompt construction for decoded AI commands.

Each command kind owns one :class:`PromptStrategy`. Adding a kind means adding
a :class:`CommandKind` member and a strategy registered against it.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, ClassVar

from nexus.core.errors import DispatchError, DispatchErrorKind
from nexus.models import ClientContext, Coordinates, DecodedCommand, LocationError, PromptSpec
from nexus.shared import Logger

logger = Logger(__name__).get_logger()

DEFAULT_MODEL = "gemini-pro"


class CommandKind(StrEnum):
    CONTEXTUAL_SEARCH = "contextual-search"
    LOCATION_ASSISTANT = "location-assistant"
    PRODUCT_INFO = "product-info"
    CUSTOMER_SUPPORT = "customer-support"


def _text(value: Any) -> str:
    # Render values the way the browser client would interpolate them
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _param(parameters: Mapping[str, Any], name: str, default: str) -> str:
    value = parameters.get(name)
    return _text(value) if value else default


# ================================================================================
#       Context clauses
# ================================================================================
def location_clause(context: ClientContext) -> str:
    if isinstance(context.location, Coordinates):
        return (
            " User's approximate location: "
            f"Latitude {_text(context.location.latitude)}, "
            f"Longitude {_text(context.location.longitude)}."
        )
    return ""


def device_clause(context: ClientContext) -> str:
    if context.device:
        return f" Device: {_text(context.device)}."
    return ""


def timestamp_clause(context: ClientContext) -> str:
    if context.timestamp:
        return f" Current time: {context.timestamp}."
    return ""


def locale_clause(context: ClientContext) -> str:
    if context.locale:
        return f" User's locale: {context.locale}."
    return ""


def client_clauses(context: ClientContext) -> str:
    """Device, time and locale clauses; empty for fields the client left out."""
    return device_clause(context) + timestamp_clause(context) + locale_clause(context)


def context_suffix(context: ClientContext) -> str:
    return location_clause(context) + client_clauses(context)


# ================================================================================
#       Strategies
# ================================================================================
class PromptStrategy(ABC):
    kind: ClassVar[CommandKind]

    @abstractmethod
    def render(self, parameters: Mapping[str, Any], context: ClientContext) -> str: ...


class ContextualSearch(PromptStrategy):
    kind = CommandKind.CONTEXTUAL_SEARCH

    def render(self, parameters, context):
        intent = _param(parameters, "intent", "general query")
        extra = parameters.get("context")
        search_context = f" Context: {_text(extra)}." if extra else ""
        return (
            f'Perform a smart search for: "{intent}".'
            f"{search_context}{context_suffix(context)}"
            " Provide a concise, relevant answer or a list of search suggestions."
        )


class LocationAssistant(PromptStrategy):
    kind = CommandKind.LOCATION_ASSISTANT

    @staticmethod
    def whereabouts(context: ClientContext) -> str:
        location = context.location
        if isinstance(location, Coordinates):
            return (
                f"User is at Latitude: {_text(location.latitude)}, "
                f"Longitude: {_text(location.longitude)}."
            )
        if isinstance(location, LocationError):
            return f"User location not available: {location.error}."
        return "User location unknown."

    def render(self, parameters, context):
        intent = _param(parameters, "intent", "find places")
        return (
            "Act as a helpful location assistant. "
            f'Based on the intent "{intent}" and {self.whereabouts(context)}'
            f"{client_clauses(context)}"
            " suggest relevant places, directions, or information."
        )


class ProductInfo(PromptStrategy):
    kind = CommandKind.PRODUCT_INFO

    def render(self, parameters, context):
        product_id = parameters.get("productId")
        if product_id is None:
            # TODO: reject product-info without productId once deployed QR codes are reissued
            logger.warning("product-info command has no productId; rendering 'undefined'.")
        category = _param(parameters, "category", "unknown")
        return (
            f'Provide detailed information for product ID "{_text(product_id)}" '
            f'from the "{category}" category.'
            f"{context_suffix(context)}"
            " Focus on key features, specifications, and benefits."
        )


class CustomerSupport(PromptStrategy):
    kind = CommandKind.CUSTOMER_SUPPORT

    def render(self, parameters, context):
        topic = _param(parameters, "topic", "general inquiry")
        user_name = _param(parameters, "userName", "Customer")
        return (
            f"As a customer support AI, respond to {user_name}'s inquiry "
            f'about "{topic}".'
            f"{context_suffix(context)}"
            " Provide clear, helpful guidance or direct them to relevant resources."
        )


STRATEGIES: dict[CommandKind, PromptStrategy] = {
    strategy.kind: strategy
    for strategy in (ContextualSearch(), LocationAssistant(), ProductInfo(), CustomerSupport())
}


# ================================================================================
#       Dispatcher
# ================================================================================
class CommandDispatcher:
    def __init__(self, model: str = DEFAULT_MODEL):
        self.model = model

    def dispatch(self, cmd: DecodedCommand) -> PromptSpec:
        try:
            kind = CommandKind(cmd.command)
        except ValueError as e:
            logger.warning("Unknown AI command: %s", cmd.command)
            raise DispatchError(
                DispatchErrorKind.UNKNOWN_COMMAND, "Unknown AI command."
            ) from e

        prompt_text = STRATEGIES[kind].render(cmd.parameters, cmd.client_context)
        logger.debug("Rendered %s prompt: %s", kind, prompt_text)
        return PromptSpec(model=self.model, prompt_text=prompt_text)

"""
Text-generation collaborators.

The command pipeline only needs ``generate(model, prompt_text) -> text``;
:class:`GeminiGenerator` provides it over the Generative Language REST API.
"""
from typing import Protocol

import httpx

from nexus.core.errors import GenerationError
from nexus.shared import Logger

logger = Logger(__name__).get_logger()

NO_RESPONSE = "No response from AI."


class TextGenerator(Protocol):
    async def generate(self, model: str, prompt_text: str) -> str: ...


class GeminiGenerator:
    """Client for the ``models/{model}:generateContent`` endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def generate(self, model: str, prompt_text: str) -> str:
        url = f"{self.base_url}/models/{model}:generateContent"
        body = {"contents": [{"role": "user", "parts": [{"text": prompt_text}]}]}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    url, params={"key": self.api_key}, json=body
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Generation service returned %s: %s",
                e.response.status_code,
                e.response.text[:500],
            )
            raise GenerationError(
                f"Generation service returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Generation request failed: %s", e)
            raise GenerationError(f"Generation request failed: {e}") from e

        return self.extract_text(data)

    @staticmethod
    def extract_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            logger.warning("Generation service returned no candidates.")
            return NO_RESPONSE

        try:
            return candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("Unexpected generation response shape") from e

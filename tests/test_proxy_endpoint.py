#!/usr/bin/env python3
"""
Tests for the /proxy-gemini endpoint with the generation service stubbed out.
"""

import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

import nexus.routers.ai as ai_module
from nexus.core import GeminiGenerator, PayloadCodec
from nexus.main import app
from nexus.models import DecodedCommand

client = TestClient(app)

PASSPHRASE = "endpoint-test-passphrase"
secure_codec = PayloadCodec(PASSPHRASE)


class StubGenerator:
    def __init__(self):
        self.calls = []

    async def generate(self, model, prompt_text):
        self.calls.append((model, prompt_text))
        return f"echo: {prompt_text}"


@pytest.fixture
def generator():
    stub = StubGenerator()
    app.dependency_overrides[ai_module.get_codec] = lambda: secure_codec
    app.dependency_overrides[ai_module.get_generator] = lambda: stub
    yield stub
    app.dependency_overrides.clear()


def transport_for(**kwargs):
    return secure_codec.encode(DecodedCommand(**kwargs))


def test_encrypted_command(generator):
    transport = transport_for(
        command="location-assistant",
        parameters={"intent": "museums"},
        client_context={"location": {"latitude": 1.5, "longitude": 2.5}},
    )

    response = client.get("/proxy-gemini", params={"nexus_ai": transport})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert "Latitude: 1.5, Longitude: 2.5" in body["aiResponse"]
    assert generator.calls[0][0] == ai_module.config.generation.model


def test_plain_command_on_encrypted_server(generator):
    raw = json.dumps({"cmd": "contextual-search", "prm": {"intent": "pizza"}}).encode()
    transport = base64.urlsafe_b64encode(raw).decode()

    response = client.get("/proxy-gemini", params={"nexus_ai": transport})

    assert response.status_code == 200
    assert 'Perform a smart search for: "pizza"' in response.json()["aiResponse"]


def test_missing_parameter(generator):
    response = client.get("/proxy-gemini")

    assert response.status_code == 400
    assert "Missing nexus_ai" in response.json()["detail"]["message"]
    assert generator.calls == []


def test_undecodable_payload(generator):
    response = client.get("/proxy-gemini", params={"nexus_ai": "not-a-payload"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Decryption/Decoding Error"
    assert generator.calls == []


def test_deeply_nested_payload(generator):
    raw = ('{"cmd":"contextual-search","prm":' + "[" * 5000 + "]" * 5000 + "}").encode()
    transport = base64.urlsafe_b64encode(raw).decode()

    response = client.get("/proxy-gemini", params={"nexus_ai": transport})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Decryption/Decoding Error"
    assert generator.calls == []


def test_codec_is_built_once_at_import():
    assert ai_module.get_codec() is ai_module.codec
    assert ai_module.get_codec() is ai_module.get_codec()


def test_missing_command(generator):
    raw = json.dumps({"prm": {"intent": "pizza"}}).encode()
    transport = base64.urlsafe_b64encode(raw).decode()

    response = client.get("/proxy-gemini", params={"nexus_ai": transport})

    assert response.status_code == 400
    assert "cmd" in response.json()["detail"]["message"]


def test_unknown_command(generator):
    response = client.get(
        "/proxy-gemini", params={"nexus_ai": transport_for(command="unknown-foo")}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Unknown AI command."
    assert generator.calls == []


def test_only_get_is_allowed(generator):
    response = client.post("/proxy-gemini", params={"nexus_ai": "x"})
    assert response.status_code == 405


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(ai_module.config.generation, "api_key", None)

    response = client.get(
        "/proxy-gemini", params={"nexus_ai": transport_for(command="customer-support")}
    )

    assert response.status_code == 500
    assert response.json()["detail"]["message"] == "API key not found."


class TestGeminiGenerator:
    """Run the real client against a mocked transport."""

    @staticmethod
    def use_gemini(handler):
        gemini = GeminiGenerator(
            api_key="test-key",
            base_url="https://generativelanguage.test/v1beta",
            transport=httpx.MockTransport(handler),
        )
        app.dependency_overrides[ai_module.get_codec] = lambda: secure_codec
        app.dependency_overrides[ai_module.get_generator] = lambda: gemini

    @pytest.fixture(autouse=True)
    def clear_overrides(self):
        yield
        app.dependency_overrides.clear()

    def test_response_text(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "Try the Louvre."}]}}]},
            )

        self.use_gemini(handler)
        response = client.get(
            "/proxy-gemini",
            params={"nexus_ai": transport_for(command="location-assistant")},
        )

        assert response.status_code == 200
        assert response.json()["aiResponse"] == "Try the Louvre."
        assert seen["url"].path.endswith(":generateContent")
        assert seen["url"].params["key"] == "test-key"
        assert "User location unknown." in seen["body"]["contents"][0]["parts"][0]["text"]

    def test_no_candidates(self):
        self.use_gemini(lambda request: httpx.Response(200, json={"candidates": []}))
        response = client.get(
            "/proxy-gemini",
            params={"nexus_ai": transport_for(command="product-info")},
        )

        assert response.status_code == 200
        assert response.json()["aiResponse"] == "No response from AI."

    def test_upstream_error(self):
        self.use_gemini(lambda request: httpx.Response(503, json={"error": "overloaded"}))
        response = client.get(
            "/proxy-gemini",
            params={"nexus_ai": transport_for(command="customer-support")},
        )

        assert response.status_code == 502

#!/usr/bin/env python3
"""
Manual check for the AI command proxy.
Sends a plain and an encrypted command to a running server and prints the replies.
"""

import json
import os

import requests

from nexus.core import PayloadCodec
from nexus.models import DecodedCommand

# Configuration
BASE_URL = "http://127.0.0.1:8000"
PASSPHRASE = os.environ.get("ENCRYPTION_PASSPHRASE")


def send(transport):
    response = requests.get(
        f"{BASE_URL}/proxy-gemini", params={"nexus_ai": transport}, timeout=60
    )
    print(f"Response Status: {response.status_code}")
    try:
        print(f"Response: {json.dumps(response.json(), indent=2)}")
    except json.JSONDecodeError:
        print(f"Response (not JSON): {response.text}")
    return response


def test_plain_command():
    print("\n=== Plain command ===")
    command = DecodedCommand(
        command="contextual-search",
        parameters={"intent": "coffee near me"},
        client_context={"locale": "en-US"},
    )
    return send(PayloadCodec().encode(command))


def test_encrypted_command():
    print("\n=== Encrypted command ===")
    if not PASSPHRASE:
        print("ENCRYPTION_PASSPHRASE not set, skipping")
        return None

    command = DecodedCommand(
        command="customer-support",
        parameters={"topic": "refunds", "userName": "Sam"},
    )
    return send(PayloadCodec(PASSPHRASE).encode(command))


def test_unknown_command():
    print("\n=== Unknown command ===")
    command = DecodedCommand(command="unknown-foo")
    return send(PayloadCodec().encode(command))


if __name__ == "__main__":
    test_plain_command()
    test_encrypted_command()
    test_unknown_command()

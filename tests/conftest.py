"""
Shared pytest fixtures for bluepages-mcp tests.

This module provides common fixtures used across all test files,
including sample 402 payment requirements, batch responses, a
well-known test wallet and a notifier that records what it is sent.
"""

import base64
import json
from typing import Any, Optional

import httpx
import pytest

from bluepages_mcp.auth import AuthContext
from bluepages_mcp.signers import LocalSigner
from bluepages_mcp.types import AuthMode, PaymentPayload


# Hardhat/Anvil default account #0, never funded on mainnet
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

USDC_BASE = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


class RecordingNotifier:
    """Notifier that keeps every notification for assertions."""

    def __init__(self):
        self.messages: list[tuple[str, str, Optional[dict[str, Any]]]] = []
        self.progress_updates: list[tuple[float, Optional[float], Optional[str]]] = []

    async def notify(self, level, message, data=None):
        self.messages.append((level, message, data))

    async def progress(self, current, total=None, message=None):
        self.progress_updates.append((current, total, message))

    def levels(self) -> list[str]:
        return [level for level, _, _ in self.messages]


def decode_payment_header(value: str) -> PaymentPayload:
    """Decode an X-PAYMENT header value the way the server would."""
    return PaymentPayload.model_validate(json.loads(base64.b64decode(value)))


def make_response(
    status_code: int,
    json_body: Any = None,
    headers: Optional[dict[str, str]] = None,
) -> httpx.Response:
    """Build a real httpx.Response with a JSON body."""
    return httpx.Response(
        status_code,
        json=json_body if json_body is not None else {},
        headers=headers,
        request=httpx.Request("GET", "https://bluepages.test"),
    )


@pytest.fixture
def notifier():
    """Fresh RecordingNotifier."""
    return RecordingNotifier()


@pytest.fixture
def signer():
    """LocalSigner for the well-known test key."""
    return LocalSigner(TEST_PRIVATE_KEY)


@pytest.fixture
def api_key_auth():
    """API-key mode credential."""
    return AuthContext(mode=AuthMode.API_KEY, api_key="bp_test_key")


@pytest.fixture
def payment_auth(signer):
    """x402 mode credential."""
    return AuthContext(mode=AuthMode.PAYMENT, signer=signer)


@pytest.fixture
def no_auth():
    """Unconfigured credential."""
    return AuthContext(mode=AuthMode.NONE)


@pytest.fixture
def sample_requirement():
    """Sample x402 402 response body."""
    return {
        "x402Version": 1,
        "error": "Payment required",
        "accepts": [
            {
                "scheme": "exact",
                "network": "base",
                "maxAmountRequired": "1000",
                "payTo": "0x1111111111111111111111111111111111111111",
                "asset": USDC_BASE,
                "maxTimeoutSeconds": 300,
                "resource": "https://bluepages.test/check",
                "description": "Bluepages lookup",
            },
            {
                "scheme": "exact",
                "network": "base-sepolia",
                "maxAmountRequired": "1000",
                "payTo": "0x2222222222222222222222222222222222222222",
                "asset": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            },
        ],
    }


@pytest.fixture
def batch_check_response():
    """Sample /batch/check response mixing addresses and handles."""
    return {
        "results": {
            "addresses": {
                "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa": {
                    "exists": True,
                    "twitter": True,
                    "farcaster": False,
                },
                "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb": {"exists": False},
            },
            "twitters": {
                "@vitalik": {"exists": True, "twitter": True, "farcaster": True},
            },
        },
    }


@pytest.fixture
def batch_data_response():
    """Sample /batch/data response mixing addresses and handles."""
    return {
        "results": {
            "addresses": {
                "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa": {
                    "found": True,
                    "primary": {
                        "twitter": "@alice",
                        "metadata": {"displayName": "Alice", "source": "ens"},
                    },
                    "alternates": [{"twitter": "@alice_old"}, {"twitter": "@alice2"}],
                },
                "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb": {"found": False},
            },
            "twitters": {
                "@vitalik": {
                    "found": True,
                    "primary": {
                        "address": "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045",
                        "metadata": {"displayName": "vitalik.eth"},
                    },
                },
            },
        },
    }

"""Pytest fixtures for checkout lifecycle tests."""

import asyncio

import pytest

from src.integrations.contracts.payments import GatewayReply


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and only yields once."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def fast_sleep():
    return RecordingSleep()


@pytest.fixture
def accepted_reply():
    return GatewayReply(status_code=200, data={"ResponseCode": "0", "CheckoutRequestID": "abc123"})


@pytest.fixture(autouse=True)
def _clear_checkout_env(monkeypatch):
    for name in ("CHECKOUT_API_BASE_URL", "CHECKOUT_POLL_INTERVAL_SECONDS", "INTEGRATIONS_MODE"):
        monkeypatch.delenv(name, raising=False)

import asyncio

import pytest
from fastapi import HTTPException

from src.api.endpoints.checkout import CheckoutSessionStore, sweep_idle_sessions
from src.integrations.clients.mocks.payments import MockStkPushClient
from src.integrations.contracts.payments import GatewayReply
from src.utils.config_loader import CheckoutConfig


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def status_reply(value, **extra):
    return GatewayReply(status_code=200, data={"status": value, **extra})


def pending_forever(accepted_reply):
    return MockStkPushClient(initiate_replies=[accepted_reply], status_replies=[status_reply("Pending")])


async def open_pending_session(store, gateway, **config):
    session = store.create(gateway, CheckoutConfig(poll_interval_seconds=0.01, **config))
    session.controller.set_phone_number("712345678")
    session.controller.set_amount("100")
    await session.controller.submit()
    return session


@pytest.mark.asyncio
async def test_idle_pending_session_is_torn_down(accepted_reply):
    gateway = pending_forever(accepted_reply)
    clock = FakeClock()
    store = CheckoutSessionStore(clock=clock)
    session = await open_pending_session(store, gateway, session_idle_ttl_seconds=30)
    assert session.controller.poller.active

    clock.now += 31
    assert store.evict_idle() == 1

    assert session.controller.disposed
    assert session.controller.poller.active is False
    checks = len(gateway.status_checks)
    await asyncio.sleep(0.05)
    assert len(gateway.status_checks) == checks
    with pytest.raises(HTTPException) as excinfo:
        store.get(session.session_id)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_reading_a_session_keeps_it_alive(accepted_reply):
    clock = FakeClock()
    store = CheckoutSessionStore(clock=clock)
    session = await open_pending_session(store, pending_forever(accepted_reply), session_idle_ttl_seconds=30)

    clock.now += 20
    assert store.get(session.session_id) is session
    clock.now += 20

    assert store.evict_idle() == 0
    assert session.controller.poller.active
    store.close_all()
    assert len(store) == 0


@pytest.mark.asyncio
async def test_any_access_evicts_other_idle_sessions(accepted_reply):
    clock = FakeClock()
    store = CheckoutSessionStore(clock=clock)
    stale = await open_pending_session(store, pending_forever(accepted_reply), session_idle_ttl_seconds=30)

    clock.now += 60
    fresh = store.create(MockStkPushClient(), CheckoutConfig())

    assert stale.controller.disposed
    assert len(store) == 1
    assert store.get(fresh.session_id) is fresh
    store.close_all()


@pytest.mark.asyncio
async def test_background_sweep_evicts_without_traffic(accepted_reply):
    clock = FakeClock()
    store = CheckoutSessionStore(clock=clock)
    session = await open_pending_session(store, pending_forever(accepted_reply), session_idle_ttl_seconds=30)
    sweeper = asyncio.ensure_future(sweep_idle_sessions(store, 0.01))

    clock.now += 31
    await asyncio.sleep(0.05)
    sweeper.cancel()

    assert len(store) == 0
    assert session.controller.disposed

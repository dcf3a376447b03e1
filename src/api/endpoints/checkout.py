"""
Checkout session endpoints.

Each session hosts one CheckoutController; the HTTP client is the view. It
edits the form, triggers submit, and polls GET for the rendered state.
Deleting a session is the teardown: the controller is disposed and any
in-flight status check is ignored. Sessions left idle past their TTL are torn
down the same way.
"""

import asyncio
import logging
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Union
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.checkout.controller import CheckoutController
from src.checkout.state import state_message
from src.integrations.clients.mocks.payments import MockStkPushClient
from src.integrations.clients.real_http.payments import HttpStkPushClient
from src.integrations.contracts.interfaces import StkPushGateway
from src.utils.config_loader import CheckoutConfig, load_checkout_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout"])

SUCCESS_PATH = "/success"


class CheckoutForm(BaseModel):
    phone_number: Optional[str] = None
    amount: Optional[Union[str, int, float]] = None


class CheckoutSession:
    def __init__(self, session_id: str, gateway: StkPushGateway, config: CheckoutConfig, now: float) -> None:
        self.session_id = session_id
        self.redirect_to: Optional[str] = None
        self.idle_ttl_seconds = config.session_idle_ttl_seconds
        self.last_seen = now
        self.controller = CheckoutController(
            gateway,
            navigate=self._navigate,
            poll_interval_seconds=config.poll_interval_seconds,
        )

    def _navigate(self) -> None:
        self.redirect_to = SUCCESS_PATH

    def expired(self, now: float) -> bool:
        return now - self.last_seen > self.idle_ttl_seconds

    def view(self) -> Dict[str, Any]:
        controller = self.controller
        state = controller.state
        if controller.loading:
            submit_label = "Waiting for payment..."
        else:
            submit_label = f"Pay KES {controller.amount or '0'}"
        return {
            "session_id": self.session_id,
            "state": state.kind.value,
            "message": state_message(state),
            "checkout_request_id": getattr(state, "checkout_request_id", None),
            "loading": controller.loading,
            "phone_number": controller.phone_number,
            "amount": controller.amount,
            "can_submit": controller.can_submit,
            "submit_label": submit_label,
            "redirect_to": self.redirect_to,
        }


class CheckoutSessionStore:
    """In-memory sessions; nothing survives a restart.

    A session the client stops reading (tab closed, navigated away) is torn
    down once it has been idle longer than its TTL, the same as a DELETE.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._sessions: Dict[str, CheckoutSession] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, gateway: StkPushGateway, config: CheckoutConfig) -> CheckoutSession:
        self.evict_idle()
        session = CheckoutSession(str(uuid4()), gateway, config, now=self._clock())
        self._sessions[session.session_id] = session
        logger.info("Opened checkout session %s", session.session_id)
        return session

    def get(self, session_id: str) -> CheckoutSession:
        self.evict_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Checkout session not found")
        session.last_seen = self._clock()
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise HTTPException(status_code=404, detail="Checkout session not found")
        session.controller.dispose()
        logger.info("Closed checkout session %s", session_id)

    def evict_idle(self) -> int:
        """Dispose every session idle past its TTL. Returns how many were closed."""
        now = self._clock()
        expired = [session_id for session_id, session in self._sessions.items() if session.expired(now)]
        for session_id in expired:
            logger.info("Checkout session %s idle too long, tearing down", session_id)
            self.close(session_id)
        return len(expired)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)


async def sweep_idle_sessions(store: CheckoutSessionStore, interval_seconds: float) -> None:
    """Evict idle sessions forever; runs as a background task of the app."""
    while True:
        await asyncio.sleep(interval_seconds)
        store.evict_idle()


session_store = CheckoutSessionStore()


@lru_cache(maxsize=1)
def get_checkout_config() -> CheckoutConfig:
    return load_checkout_config()


def get_session_store() -> CheckoutSessionStore:
    return session_store


def get_gateway(config: CheckoutConfig = Depends(get_checkout_config)) -> StkPushGateway:
    if config.use_real_gateway():
        # Real mode never falls back to the mock; a missing base URL fails the submit.
        return HttpStkPushClient(base_url=config.api_base_url, timeout_seconds=config.request_timeout_seconds)
    return MockStkPushClient(pending_checks=config.mock_pending_checks)


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(
    store: CheckoutSessionStore = Depends(get_session_store),
    gateway: StkPushGateway = Depends(get_gateway),
    config: CheckoutConfig = Depends(get_checkout_config),
):
    return store.create(gateway, config).view()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, store: CheckoutSessionStore = Depends(get_session_store)):
    return store.get(session_id).view()


@router.put("/sessions/{session_id}/form")
async def update_form(session_id: str, form: CheckoutForm, store: CheckoutSessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    if form.phone_number is not None:
        session.controller.set_phone_number(form.phone_number)
    if form.amount is not None:
        session.controller.set_amount(str(form.amount))
    return session.view()


@router.post("/sessions/{session_id}/submit")
async def submit(session_id: str, store: CheckoutSessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    # The pay button stays disabled while loading; this is the only debounce.
    if session.controller.loading:
        raise HTTPException(status_code=409, detail="A payment is already in progress")
    session.redirect_to = None
    await session.controller.submit()
    return session.view()


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str, store: CheckoutSessionStore = Depends(get_session_store)):
    store.close(session_id)
    return {"session_id": session_id, "closed": True}

"""
Status poller - watch one pending payment intent until it settles.

The poller sleeps for the interval, checks the status endpoint once, and
repeats. Only a terminal provider status ends the loop on its own; transport
errors, non-success HTTP replies and malformed bodies are logged and the next
tick goes ahead, because the payer may still be entering their PIN.

Each run captures a CancellationToken when it is armed. `stop()` cancels the
token and the task synchronously, and the token is checked again after every
await so that a reply arriving after teardown is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from src.checkout.errors import TransactionFailed, TransportError
from src.checkout.state import CheckoutState, ErrorState, PaymentIntent, SuccessState
from src.integrations.contracts.interfaces import StkPushGateway
from src.integrations.contracts.payments import ProviderStatus, is_terminal_status
from src.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    StatusResponseModel,
    normalize_status_response,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 2.0

OnTerminal = Callable[[PaymentIntent, CheckoutState], None]
Sleep = Callable[[float], Awaitable[None]]


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def interpret_status(check: StatusResponseModel) -> Optional[CheckoutState]:
    """Map a provider status to a terminal state, or None to keep polling.

    Raises:
        TransactionFailed: the provider reported Failed or Cancelled
    """
    if not is_terminal_status(check.status):
        return None
    if check.status == ProviderStatus.SUCCESS.value:
        return SuccessState()
    raise TransactionFailed(check.result_desc, payload=check.raw)


def _is_current_task(task: asyncio.Task) -> bool:
    try:
        return asyncio.current_task() is task
    except RuntimeError:
        # No running loop: called from synchronous teardown code.
        return False


class StatusPoller:
    def __init__(
        self,
        gateway: StkPushGateway,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.gateway = gateway
        self.interval_seconds = interval_seconds
        self._sleep = sleep or asyncio.sleep
        self._task: Optional[asyncio.Task] = None
        self._token: Optional[CancellationToken] = None
        self._intent: Optional[PaymentIntent] = None

    @property
    def active(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and self._token is not None
            and not self._token.cancelled
        )

    @property
    def intent(self) -> Optional[PaymentIntent]:
        return self._intent if self.active else None

    def start(self, intent: PaymentIntent, on_terminal: OnTerminal) -> CancellationToken:
        """Arm polling for `intent`. Must be called from a running event loop.

        Arming the checkout request id that is already being polled returns the
        existing token instead of starting a second timer.
        """
        if self.active and self._intent is not None and self._intent.checkout_request_id == intent.checkout_request_id:
            logger.debug("Poller already active for %s", intent.checkout_request_id)
            return self._token

        self.stop()
        token = CancellationToken()
        self._token = token
        self._intent = intent
        self._task = asyncio.get_running_loop().create_task(
            self._run(intent, token, on_terminal),
            name=f"status-poller-{intent.checkout_request_id}",
        )
        return token

    def stop(self) -> None:
        if self._token is not None:
            self._token.cancel()
        task = self._task
        if task is not None and not task.done() and not _is_current_task(task):
            task.cancel()
        if task is not None:
            logger.info("Stopped polling for %s", self._intent.checkout_request_id if self._intent else "?")
        self._task = None
        self._token = None
        self._intent = None

    async def wait(self) -> None:
        """Block until the current run (if any) has finished or been cancelled."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def check_once(self, intent: PaymentIntent) -> Optional[CheckoutState]:
        """Run one status check. None means no decision yet.

        Raises:
            TransactionFailed: the provider reported Failed or Cancelled
        """
        checkout_request_id = intent.checkout_request_id
        try:
            reply = await self.gateway.check_status(checkout_request_id)
        except TransportError as exc:
            logger.warning("Polling error for %s: %s", checkout_request_id, exc)
            return None

        if not reply.ok:
            logger.warning("Status check for %s returned HTTP %s", checkout_request_id, reply.status_code)
            return None

        try:
            check = normalize_status_response(reply.data)
        except IntegrationResponseError as exc:
            logger.warning("Ignoring malformed status reply for %s: %s", checkout_request_id, exc)
            return None

        logger.debug("Status for %s: %s", checkout_request_id, check.status)
        return interpret_status(check)

    async def _run(self, intent: PaymentIntent, token: CancellationToken, on_terminal: OnTerminal) -> None:
        logger.info(f"Polling {intent.checkout_request_id} every {self.interval_seconds}s")
        while not token.cancelled:
            await self._sleep(self.interval_seconds)
            if token.cancelled:
                break

            try:
                outcome = await self.check_once(intent)
            except TransactionFailed as exc:
                outcome = ErrorState(exc.message)

            if outcome is None:
                continue
            if token.cancelled:
                logger.debug("Discarding late status for %s", intent.checkout_request_id)
                break

            if self._token is token:
                self.stop()
            on_terminal(intent, outcome)
            return

"""
Checkout controller - owns the lifecycle of one payment intent at a time.

The view renders whatever the controller exposes (`state`, `loading`, the
form fields) and forwards user actions to it. The controller is the only
place that moves the lifecycle between Idle, Pending, Success and Error.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from src.checkout.errors import CheckoutError, ValidationBlocked
from src.checkout.initiator import initiate_payment
from src.checkout.poller import DEFAULT_POLL_INTERVAL_SECONDS, Sleep, StatusPoller
from src.checkout.state import (
    CheckoutState,
    ErrorState,
    IdleState,
    LifecycleState,
    PaymentIntent,
    PendingState,
    SuccessState,
)
from src.checkout.validation import (
    build_stk_push_request,
    is_valid_amount,
    is_valid_phone,
    sanitize_phone,
    truncate_phone,
)
from src.integrations.contracts.interfaces import StkPushGateway

logger = logging.getLogger(__name__)

Listener = Callable[["CheckoutController"], None]


class CheckoutController:
    def __init__(
        self,
        gateway: StkPushGateway,
        *,
        navigate: Optional[Callable[[], None]] = None,
        on_change: Optional[Listener] = None,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.gateway = gateway
        self._navigate = navigate
        self._on_change = on_change
        self.poller = StatusPoller(gateway, interval_seconds=poll_interval_seconds, sleep=sleep)

        self.phone_number = ""
        self.amount = ""
        self.loading = False
        self.state: CheckoutState = IdleState()
        self.intent: Optional[PaymentIntent] = None
        self.navigated = False
        self._generation = 0
        self._disposed = False

    # ------------------------------------------------------------------
    # Form input
    # ------------------------------------------------------------------

    def set_phone_number(self, raw: str) -> None:
        self.phone_number = truncate_phone(sanitize_phone(raw))
        self._notify()

    def set_amount(self, raw: str) -> None:
        self.amount = "" if raw is None else str(raw)
        self._notify()

    @property
    def is_valid_phone(self) -> bool:
        return is_valid_phone(self.phone_number)

    @property
    def is_valid_amount(self) -> bool:
        return is_valid_amount(self.amount)

    @property
    def can_submit(self) -> bool:
        """What the view uses to enable the pay button."""
        return not self.loading and self.is_valid_phone and self.is_valid_amount

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def submit(self) -> None:
        """Start a fresh payment intent from the current form values.

        A no-op when the input is invalid or the controller is disposed. Does
        not deduplicate: the view must keep the trigger disabled while
        `loading` is true.
        """
        if self._disposed:
            return
        try:
            request = build_stk_push_request(self.phone_number, self.amount)
        except ValidationBlocked:
            logger.debug("Submission blocked: phone or amount invalid")
            return

        self._generation += 1
        generation = self._generation
        self.intent = None
        self.navigated = False
        self.loading = True
        self._set_state(IdleState())

        try:
            intent = await initiate_payment(self.gateway, request)
        except CheckoutError as exc:
            if self._is_stale(generation):
                return
            self.loading = False
            self._set_state(ErrorState(exc.message))
            return
        except Exception:
            # Misconfiguration (e.g. no base URL): unlock the form and let the caller report it.
            if not self._is_stale(generation):
                self.loading = False
                self._notify()
            raise

        if self._is_stale(generation):
            logger.debug("Discarding initiation result for %s", intent.checkout_request_id)
            return

        self.intent = intent
        self._set_state(PendingState(checkout_request_id=intent.checkout_request_id))

    def dispose(self) -> None:
        """Tear down: cancel polling now and ignore anything that resolves later."""
        if self._disposed:
            return
        self._disposed = True
        self.poller.stop()
        self.intent = None
        logger.info("Checkout controller disposed")

    async def wait_for_outcome(self) -> CheckoutState:
        """Wait until the current poll run ends, then return the state."""
        await self.poller.wait()
        return self.state

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_stale(self, generation: int) -> bool:
        return self._disposed or generation != self._generation

    def _set_state(self, state: CheckoutState) -> None:
        previous = self.state
        self.state = state
        if previous != state:
            logger.info("Checkout state %s -> %s", previous.kind.value, state.kind.value)

        if state.kind is LifecycleState.PENDING:
            self._arm_poller()
        else:
            self.poller.stop()
        self._notify()

    def _arm_poller(self) -> None:
        if self.intent is None or self.state.kind is not LifecycleState.PENDING:
            return
        self.poller.start(self.intent, self._apply_poll_result)

    def _apply_poll_result(self, intent: PaymentIntent, outcome: CheckoutState) -> None:
        if self._disposed or intent is not self.intent or self.state.kind is not LifecycleState.PENDING:
            logger.debug("Ignoring poll result for superseded intent %s", intent.checkout_request_id)
            return

        self.loading = False
        self.intent = None
        self._set_state(outcome)
        if isinstance(outcome, SuccessState):
            self._navigate_once()

    def _navigate_once(self) -> None:
        if self.navigated:
            return
        self.navigated = True
        if self._navigate is not None:
            self._navigate()

    def _notify(self) -> None:
        if self._on_change is not None and not self._disposed:
            self._on_change(self)

"""
Lifecycle states for a single payment intent.

The state is a closed set of variants. Only the variants that need data
carry it: Pending holds the checkout request id and its message, Error holds
its message, Idle and Success hold nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional, Union

PENDING_MESSAGE = "Payment initiated! Please check your phone to enter PIN."


class LifecycleState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class IdleState:
    kind: ClassVar[LifecycleState] = LifecycleState.IDLE


@dataclass(frozen=True)
class PendingState:
    checkout_request_id: str
    message: str = PENDING_MESSAGE
    kind: ClassVar[LifecycleState] = LifecycleState.PENDING


@dataclass(frozen=True)
class SuccessState:
    kind: ClassVar[LifecycleState] = LifecycleState.SUCCESS


@dataclass(frozen=True)
class ErrorState:
    message: str
    kind: ClassVar[LifecycleState] = LifecycleState.ERROR


CheckoutState = Union[IdleState, PendingState, SuccessState, ErrorState]


@dataclass(frozen=True, eq=False)
class PaymentIntent:
    """One acknowledged push request. Compared by identity, never reused."""

    checkout_request_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def is_terminal(state: CheckoutState) -> bool:
    return state.kind in (LifecycleState.SUCCESS, LifecycleState.ERROR)


def state_message(state: CheckoutState) -> Optional[str]:
    """Return the display message attached to the state, if it has one."""
    return getattr(state, "message", None)

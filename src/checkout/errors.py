"""
Checkout error taxonomy.

Every failure that can end a payment intent is a `CheckoutError` carrying the
single user-visible message the view displays. The controller catches these
and moves to the error state; none of them is fatal to the process.

`ValidationBlocked` is the odd one out: it stops a submission before any
request is made and is never surfaced as an error banner.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

NETWORK_ERROR_MESSAGE = "Network error."
SERVER_ERROR_MESSAGE = "Server error occurred."
INITIATION_FAILED_MESSAGE = "Failed to initiate payment."
TRANSACTION_FAILED_MESSAGE = "Transaction failed or was cancelled."


class CheckoutError(Exception):
    default_message = "Payment could not be completed."

    def __init__(self, message: Optional[str] = None, *, payload: Optional[Dict[str, Any]] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.payload = payload or {}


class ValidationBlocked(CheckoutError):
    """Phone number or amount failed validation; the request was not sent."""

    default_message = "Submission blocked by invalid input."


class TransportError(CheckoutError):
    """No usable response: connection failure, timeout or unreadable body."""

    default_message = NETWORK_ERROR_MESSAGE


class ServerError(CheckoutError):
    """The payment backend answered with a non-success HTTP status."""

    default_message = SERVER_ERROR_MESSAGE

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: int = 500,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, payload=payload)
        self.status_code = status_code


class ProviderRejected(CheckoutError):
    """HTTP succeeded but the provider refused to start the push."""

    default_message = INITIATION_FAILED_MESSAGE


class TransactionFailed(CheckoutError):
    """The provider reported the payment as failed or cancelled."""

    default_message = TRANSACTION_FAILED_MESSAGE

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union

"""
Payment contracts.

Defines the request/response structures for the STK push operations:
- initiating a push (POST /stkpush/)
- checking a push's status (GET /check-status/{checkout_request_id}/)

These contracts must be used by both:
- clients/mocks/payments.py (fake responses for development/testing)
- clients/real_http/payments.py (real API calls)
"""

# Sentinel the backend returns in `ResponseCode` when the push was accepted.
ACCEPTED_RESPONSE_CODE = "0"


class ProviderStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    PENDING = "Pending"


@dataclass
class StkPushRequest:
    phone: str                           # "254" + 9 local digits
    amount: Union[int, float]

    def to_payload(self) -> Dict[str, Any]:
        return {"phone": self.phone, "amount": self.amount}


@dataclass
class GatewayReply:
    """HTTP status plus decoded JSON body, before any interpretation."""
    status_code: int
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def is_terminal_status(status: str) -> bool:
    """Return True if the provider status is final for the transaction."""
    return status in {ProviderStatus.SUCCESS.value, ProviderStatus.FAILED.value, ProviderStatus.CANCELLED.value}

"""
Integrations layer.
This package contains all code used to communicate with the payment backend:
- initiating an M-Pesa STK push
- checking the status of a push by its checkout request id

Key rule:
- The checkout controller MUST NOT call the backend directly.
- It calls a gateway client (under src/integrations/clients).
- We use the MOCK client during development and swap to the REAL_HTTP client when a backend is configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/endpoints/checkout.py).
"""

from .contracts.interfaces import StkPushGateway
from .contracts.payments import (
    ACCEPTED_RESPONSE_CODE,
    GatewayReply,
    ProviderStatus,
    StkPushRequest,
    is_terminal_status,
)

__all__ = [
    # interfaces
    "StkPushGateway",
    # payments
    "ACCEPTED_RESPONSE_CODE", "GatewayReply", "ProviderStatus",
    "StkPushRequest", "is_terminal_status",
]

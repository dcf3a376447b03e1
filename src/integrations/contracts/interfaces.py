from abc import ABC, abstractmethod

from .payments import GatewayReply, StkPushRequest


# ---------------------------------------------------------------------------
# Abstract gateway interface
# ---------------------------------------------------------------------------

class StkPushGateway(ABC):
    """Every STK push backend client (mock or real) must implement this interface.

    Implementations raise `TransportError` when no usable response arrives
    and otherwise return the raw reply; interpreting it is the caller's job.
    """

    @abstractmethod
    async def initiate_stk_push(self, request: StkPushRequest) -> GatewayReply:
        """Ask the backend to send a PIN prompt to the payer's phone."""

    @abstractmethod
    async def check_status(self, checkout_request_id: str) -> GatewayReply:
        """Fetch the current status of a previously initiated push."""

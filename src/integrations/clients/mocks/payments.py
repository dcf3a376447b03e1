"""
Mock STK Push Client.

Purpose:
- Provides a fake payment backend used for development/testing
- Does NOT make any network calls
- Returns deterministic or scripted replies

Usage:
- Selected in src/api/endpoints/checkout.py when no real backend is configured
- Used by the test-suite to script initiation and polling replies

Behavior guidelines:
- initiate_stk_push(...) accepts the push and issues a checkout request id
- check_status(...) reports "Pending" for `pending_checks` polls, then "Success"
- Scripted replies (GatewayReply or an exception to raise) take precedence;
  the last scripted status reply repeats once the script runs out

Swap:
Replace this mock client with the real HTTP client in clients/real_http/payments.py
when a backend base URL is configured.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Sequence, Union

from src.integrations.contracts.interfaces import StkPushGateway
from src.integrations.contracts.payments import (
    ACCEPTED_RESPONSE_CODE,
    GatewayReply,
    ProviderStatus,
    StkPushRequest,
)

logger = logging.getLogger(__name__)

ScriptedReply = Union[GatewayReply, Exception]


class MockStkPushClient(StkPushGateway):
    def __init__(
        self,
        initiate_replies: Optional[Sequence[ScriptedReply]] = None,
        status_replies: Optional[Sequence[ScriptedReply]] = None,
        pending_checks: int = 2,
    ) -> None:
        self._initiate_script: List[ScriptedReply] = list(initiate_replies or [])
        self._status_script: List[ScriptedReply] = list(status_replies or [])
        self.pending_checks = pending_checks
        self.requests: List[StkPushRequest] = []
        self.status_checks: List[str] = []
        self._checks_by_id: Dict[str, int] = {}

    async def initiate_stk_push(self, request: StkPushRequest) -> GatewayReply:
        self.requests.append(request)
        if self._initiate_script:
            return _play(self._initiate_script.pop(0))

        checkout_request_id = f"ws_CO_{uuid.uuid4().hex[:20].upper()}"
        logger.info("Mock STK push to %s for %s -> %s", request.phone, request.amount, checkout_request_id)
        return GatewayReply(
            status_code=200,
            data={
                "ResponseCode": ACCEPTED_RESPONSE_CODE,
                "CheckoutRequestID": checkout_request_id,
                "ResponseDescription": "Success. Request accepted for processing",
            },
        )

    async def check_status(self, checkout_request_id: str) -> GatewayReply:
        self.status_checks.append(checkout_request_id)
        if self._status_script:
            reply = self._status_script[0] if len(self._status_script) == 1 else self._status_script.pop(0)
            return _play(reply)

        seen = self._checks_by_id.get(checkout_request_id, 0) + 1
        self._checks_by_id[checkout_request_id] = seen
        if seen <= self.pending_checks:
            return GatewayReply(status_code=200, data={"status": ProviderStatus.PENDING.value})
        return GatewayReply(
            status_code=200,
            data={"status": ProviderStatus.SUCCESS.value, "result_desc": "The service request is processed successfully."},
        )


def _play(reply: ScriptedReply) -> GatewayReply:
    if isinstance(reply, Exception):
        raise reply
    return reply

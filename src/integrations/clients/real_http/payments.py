"""
Real STK Push HTTP Client.

Used when a payment backend base URL is configured (CHECKOUT_API_BASE_URL).
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from src.checkout.errors import TransportError
from src.integrations.contracts.interfaces import StkPushGateway
from src.integrations.contracts.payments import GatewayReply, StkPushRequest

logger = logging.getLogger(__name__)


class HttpStkPushClient(StkPushGateway):
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("CHECKOUT_API_BASE_URL", "")).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def initiate_stk_push(self, request: StkPushRequest) -> GatewayReply:
        url = f"{self._require_base_url()}/stkpush/"
        return await self._send("POST", url, json=request.to_payload())

    async def check_status(self, checkout_request_id: str) -> GatewayReply:
        url = f"{self._require_base_url()}/check-status/{quote(checkout_request_id, safe='')}/"
        return await self._send("GET", url)

    def _require_base_url(self) -> str:
        if not self.base_url:
            raise ValueError("CHECKOUT_API_BASE_URL is not configured.")
        return self.base_url

    async def _send(self, method: str, url: str, **kwargs: Any) -> GatewayReply:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise TransportError(payload={"url": url}) from exc

        try:
            data = response.json() if response.content else {}
        except ValueError as exc:
            logger.error("%s %s returned an unreadable body (HTTP %s)", method, url, response.status_code)
            raise TransportError(payload={"url": url, "status_code": response.status_code}) from exc

        if not isinstance(data, dict):
            data = {}
        return GatewayReply(status_code=response.status_code, data=data)

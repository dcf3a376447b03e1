"""
Intent initiator - send one STK push and classify the backend's answer.
"""

from __future__ import annotations

import logging

from src.checkout.errors import ProviderRejected, ServerError
from src.checkout.state import PaymentIntent
from src.integrations.contracts.interfaces import StkPushGateway
from src.integrations.contracts.payments import StkPushRequest
from src.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    error_field,
    normalize_stk_push_response,
)

logger = logging.getLogger(__name__)


async def initiate_payment(gateway: StkPushGateway, request: StkPushRequest) -> PaymentIntent:
    """Make exactly one initiation call and return the acknowledged intent.

    Raises:
        TransportError: no response, or a body that is not JSON (from the gateway)
        ServerError: non-success HTTP status
        ProviderRejected: HTTP success but ResponseCode is not the accepted sentinel
    """
    logger.info(f"Initiating STK push for {request.phone} amount={request.amount}")
    reply = await gateway.initiate_stk_push(request)

    if not reply.ok:
        logger.warning("STK push rejected with HTTP %s: %s", reply.status_code, reply.data)
        raise ServerError(error_field(reply.data), status_code=reply.status_code, payload=reply.data)

    try:
        ack = normalize_stk_push_response(reply.data)
    except IntegrationResponseError as exc:
        raise ProviderRejected(payload=exc.payload) from exc

    if not ack.accepted:
        logger.warning("Provider declined STK push: code=%s message=%s", ack.response_code, ack.error_message)
        raise ProviderRejected(ack.error_message, payload=reply.data)

    if not ack.checkout_request_id:
        logger.error("Provider accepted STK push without a CheckoutRequestID: %s", reply.data)
        raise ProviderRejected(payload=reply.data)

    logger.info(f"STK push accepted: {ack.checkout_request_id}")
    return PaymentIntent(checkout_request_id=ack.checkout_request_id)

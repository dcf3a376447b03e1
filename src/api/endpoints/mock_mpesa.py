"""
Development-only fake of the STK push backend.

Serves the same wire shapes as the real backend so the real HTTP client can be
pointed at this app (CHECKOUT_API_BASE_URL=http://localhost:8000).
Remove or disable in production.
"""

from collections import OrderedDict
from uuid import uuid4

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.integrations.contracts.payments import ACCEPTED_RESPONSE_CODE, ProviderStatus

router = APIRouter(tags=["Mock M-Pesa"])

# M-Pesa single-transaction ceiling (KES)
MAX_TRANSACTION_AMOUNT = 250_000

# Number of "Pending" answers before a push reports "Success"; set by main.py
pending_checks = 2

# Oldest pushes are forgotten past this many
MAX_TRACKED_PUSHES = 1000

_checks: "OrderedDict[str, int]" = OrderedDict()


class StkPushBody(BaseModel):
    phone: str
    amount: float


@router.post("/stkpush/")
async def mock_stk_push(body: StkPushBody):
    """
    Example payload:
    {
        "phone": "254712345678",
        "amount": 100
    }
    """
    if not body.phone.startswith("254") or len(body.phone) != 12:
        return JSONResponse(status_code=400, content={"error": "Invalid phone number."})
    if body.amount > MAX_TRANSACTION_AMOUNT:
        return {
            "ResponseCode": "1",
            "errorMessage": f"Amount exceeds the KES {MAX_TRANSACTION_AMOUNT:,} transaction limit.",
        }

    checkout_request_id = f"ws_CO_mock_{uuid4().hex[:16]}"
    _checks[checkout_request_id] = 0
    while len(_checks) > MAX_TRACKED_PUSHES:
        _checks.popitem(last=False)
    return {
        "MerchantRequestID": uuid4().hex[:12],
        "CheckoutRequestID": checkout_request_id,
        "ResponseCode": ACCEPTED_RESPONSE_CODE,
        "ResponseDescription": "Success. Request accepted for processing",
        "CustomerMessage": "Success. Request accepted for processing",
    }


@router.get("/check-status/{checkout_request_id}/")
async def mock_check_status(checkout_request_id: str):
    if checkout_request_id not in _checks:
        return JSONResponse(status_code=404, content={"error": "Unknown CheckoutRequestID."})

    _checks[checkout_request_id] += 1
    if _checks[checkout_request_id] <= pending_checks:
        return {"status": ProviderStatus.PENDING.value}
    return {"status": ProviderStatus.SUCCESS.value, "result_desc": "The service request is processed successfully."}

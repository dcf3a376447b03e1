"""Input validation for the checkout form.

Nothing here signals an error to the user. The predicates only decide whether
a submission is allowed; `build_stk_push_request` re-checks them and raises
`ValidationBlocked` so the controller can turn a bad submit into a no-op.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from src.checkout.errors import ValidationBlocked
from src.integrations.contracts.payments import StkPushRequest

COUNTRY_CODE = "254"
LOCAL_PHONE_DIGITS = 9

_NON_DIGITS = re.compile(r"[^0-9]")


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


def sanitize_phone(raw: Any) -> str:
    """Strip every character that is not an ASCII digit. Never rejects."""
    return _NON_DIGITS.sub("", _as_str(raw))


def truncate_phone(digits: str) -> str:
    """Keep the first 9 digits; extra pasted digits are dropped, not an error."""
    return digits[:LOCAL_PHONE_DIGITS]


def is_valid_phone(value: Any) -> bool:
    return len(sanitize_phone(value)) == LOCAL_PHONE_DIGITS


def _parse_decimal(value: Any) -> Optional[Decimal]:
    text = _as_str(value).strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite() or not math.isfinite(float(amount)):
        return None
    return amount


def is_valid_amount(value: Any) -> bool:
    amount = _parse_decimal(value)
    # Checked on the float too: "1e-400" is positive but goes out as 0.0.
    return amount is not None and amount > 0 and float(amount) > 0


def parse_amount(value: Any) -> Union[int, float]:
    """Coerce a validated amount string to the number sent on the wire.

    Whole amounts go out as integers ("100" -> 100), anything else as float.
    """
    amount = _parse_decimal(value)
    if amount is None:
        raise ValueError(f"Not a valid amount: {value!r}")
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def format_phone_for_submission(sanitized_local: str) -> str:
    return COUNTRY_CODE + sanitize_phone(sanitized_local)


def build_stk_push_request(phone_number: Any, amount: Any) -> StkPushRequest:
    """Build the wire request, refusing anything the predicates reject."""
    if not is_valid_phone(phone_number) or not is_valid_amount(amount):
        raise ValidationBlocked()
    return StkPushRequest(
        phone=format_phone_for_submission(sanitize_phone(phone_number)),
        amount=parse_amount(amount),
    )

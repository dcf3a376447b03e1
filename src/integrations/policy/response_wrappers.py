from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.payments import ACCEPTED_RESPONSE_CODE


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class StkPushResponseModel(BaseModel):
    response_code: Optional[str] = None
    checkout_request_id: Optional[str] = None
    error_message: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.response_code == ACCEPTED_RESPONSE_CODE


class StatusResponseModel(BaseModel):
    status: str
    result_desc: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_stk_push_response(raw: Dict[str, Any]) -> StkPushResponseModel:
    _require_mapping(raw)
    return _build_model(
        StkPushResponseModel,
        {
            "response_code": _optional_text(raw, "ResponseCode"),
            "checkout_request_id": _optional_text(raw, "CheckoutRequestID"),
            "error_message": _optional_text(raw, "errorMessage"),
            "raw": raw,
        },
        raw,
    )


def normalize_status_response(raw: Dict[str, Any]) -> StatusResponseModel:
    _require_mapping(raw)
    status = raw.get("status")
    if not isinstance(status, str) or not status:
        raise IntegrationResponseError(f"Missing or invalid status field: {status!r}", payload=raw)

    return _build_model(
        StatusResponseModel,
        {
            "status": status,
            "result_desc": _optional_text(raw, "result_desc"),
            "raw": raw,
        },
        raw,
    )


def error_field(raw: Dict[str, Any]) -> Optional[str]:
    """Backend-supplied message on a non-success HTTP reply, if usable."""
    if not isinstance(raw, dict):
        return None
    return _optional_text(raw, "error")


def _optional_text(data: Dict[str, Any], *keys: str) -> Optional[str]:
    # Empty strings and non-string values count as absent.
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _require_mapping(raw: Any) -> None:
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"Expected a JSON object, got {type(raw).__name__}.")


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc

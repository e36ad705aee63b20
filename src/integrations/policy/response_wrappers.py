from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from src.integrations.finvu.errors import DownstreamError


class IntegrationResponseError(DownstreamError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, payload=payload)


class LoginResponseModel(BaseModel):
    token: str
    raw: Dict[str, Any] = Field(default_factory=dict)


class ConsentGenerateResponseModel(BaseModel):
    consent_handler: Optional[str] = None
    encrypted_request: Optional[str] = None
    request_date: Optional[str] = None
    encrypted_fiu_id: Optional[str] = None
    url: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class ConsentVerifyResponseModel(BaseModel):
    url: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_login_response(raw: Dict[str, Any]) -> LoginResponseModel:
    body = raw.get("body") if isinstance(raw, dict) else None
    token = _first_non_empty(body, "token") if isinstance(body, dict) else None
    if not token:
        raise IntegrationResponseError("Login failed: No token received from Finvu", payload=_as_dict(raw))
    return _build_model(LoginResponseModel, {"token": str(token), "raw": raw}, raw)


def normalize_consent_generate_response(raw: Dict[str, Any]) -> ConsentGenerateResponseModel:
    # Missing fields are passed through as None; only the envelope shape is enforced.
    body = _response_body(raw)
    return _build_model(
        ConsentGenerateResponseModel,
        {
            "consent_handler": _optional_str(_first_non_empty(body, "ConsentHandle", "consentHandle")),
            "encrypted_request": _optional_str(_first_non_empty(body, "encryptedRequest")),
            "request_date": _optional_str(_first_non_empty(body, "requestDate")),
            "encrypted_fiu_id": _optional_str(_first_non_empty(body, "encryptedFiuId")),
            "url": _optional_str(_first_non_empty(body, "url")),
            "raw": raw,
        },
        raw,
    )


def normalize_consent_verify_response(raw: Dict[str, Any]) -> ConsentVerifyResponseModel:
    body = _response_body(raw)
    return _build_model(
        ConsentVerifyResponseModel,
        {"url": _optional_str(_first_non_empty(body, "url")), "raw": raw},
        raw,
    )


def _response_body(raw: Any) -> Dict[str, Any]:
    body = raw.get("body") if isinstance(raw, dict) else None
    if not isinstance(body, dict):
        raise IntegrationResponseError(
            f"Unexpected response shape: expected an object 'body', got {type(body).__name__}",
            payload=_as_dict(raw),
        )
    return body


def _first_non_empty(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _as_dict(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {"raw": raw}


def _build_model(model_type, payload: Dict[str, Any], raw: Any):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=_as_dict(raw)) from exc

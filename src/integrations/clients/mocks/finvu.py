"""
Mock Finvu AA Client.

Purpose:
- Provides a fake Finvu AA network used for local development/testing
- Does NOT make any network calls
- Returns realistic login, consent-request and LSP-consent payloads

Usage:
- Wired in src/api/main.py when INTEGRATIONS_MODE=mock
- Used directly by tests as a recording test double

Behavior guidelines:
- /User/Login returns a token when the credentials match (any credentials if
  none were configured)
- /ConsentRequestPlus returns a fresh ConsentHandle and encrypted request
- /EncryptLspConsentRequest returns a redirect URL on the Finvu web SDK
- `overrides` maps a path to a response dict, or to an exception to raise

Swap:
Replace with clients/real_http/finvu.py by setting INTEGRATIONS_MODE=real
(the default).
"""

from __future__ import annotations

import base64
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.integrations.contracts.finvu import (
    CONSENT_REQUEST_PATH,
    ENCRYPT_LSP_CONSENT_PATH,
    LOGIN_PATH,
    AANetworkClient,
    RecordedCall,
    RequestEnvelope,
)
from src.integrations.finvu.errors import DownstreamError

MOCK_WEBVIEW_URL = "https://webvwdev.finvu.in/onboarding"


class MockFinvuClient(AANetworkClient):
    def __init__(
        self,
        user_id: Optional[str] = None,
        password: Optional[str] = None,
        token: str = "mock-finvu-token",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.user_id = user_id
        self.password = password
        self.token = token
        self.overrides: Dict[str, Any] = dict(overrides or {})
        self.calls: List[RecordedCall] = []

    def calls_to(self, path: str) -> List[RecordedCall]:
        return [c for c in self.calls if c.path == path]

    async def post(
        self,
        path: str,
        envelope: RequestEnvelope,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = envelope.to_dict()
        self.calls.append(RecordedCall(path=path, envelope=payload, token=token))

        if path in self.overrides:
            override = self.overrides[path]
            if isinstance(override, Exception):
                raise override
            return override

        if path == LOGIN_PATH:
            return self._login(payload)
        if token != self.token:
            raise DownstreamError("Request failed with status code 401", status_code=401)
        if path == CONSENT_REQUEST_PATH:
            return self._consent_request(payload)
        if path == ENCRYPT_LSP_CONSENT_PATH:
            return self._encrypt_lsp_consent(payload)
        raise DownstreamError("Request failed with status code 404", status_code=404)

    # --- Simulated endpoints -------------------------------------------------

    def _response(self, request: Dict[str, Any], body: Dict[str, Any]) -> Dict[str, Any]:
        header = dict(request.get("header") or {})
        header["ts"] = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return {"header": header, "body": body}

    def _login(self, request: Dict[str, Any]) -> Dict[str, Any]:
        body = request.get("body") or {}
        if self.user_id is not None and body.get("userId") != self.user_id:
            return self._response(request, {"error": "Invalid credentials"})
        if self.password is not None and body.get("password") != self.password:
            return self._response(request, {"error": "Invalid credentials"})
        return self._response(request, {"token": self.token})

    def _consent_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        body = request.get("body") or {}
        handle = str(uuid.uuid4())
        encrypted = base64.b64encode(
            json.dumps({"custId": body.get("custId"), "handle": handle}).encode("utf-8")
        ).decode("ascii")
        fiu_id = base64.b64encode(str(body.get("aaId", "")).encode("utf-8")).decode("ascii")
        request_date = datetime.now(timezone.utc).strftime("%d%m%Y%H%M%S%f")[:17]
        return self._response(
            request,
            {
                "ConsentHandle": handle,
                "encryptedRequest": encrypted,
                "requestDate": request_date,
                "encryptedFiuId": fiu_id,
                "url": f"{MOCK_WEBVIEW_URL}?ecreq={encrypted}&reqdate={request_date}&fi={fiu_id}",
            },
        )

    def _encrypt_lsp_consent(self, request: Dict[str, Any]) -> Dict[str, Any]:
        body = request.get("body") or {}
        token = base64.urlsafe_b64encode(
            json.dumps(
                {
                    "lspId": body.get("lspId"),
                    "consentHandles": body.get("consentHandles", []),
                    "userId": body.get("userId"),
                }
            ).encode("utf-8")
        ).decode("ascii")
        return self._response(request, {"url": f"{MOCK_WEBVIEW_URL}?lspreq={token}"})

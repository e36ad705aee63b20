"""
Finvu AA contracts.

Request/response structures shared by:
- clients/real_http/finvu.py (real Finvu AA network calls)
- clients/mocks/finvu.py (network-free simulator for development/testing)
- integrations/finvu/* (token, session and consent services)

Field names on the wire are camelCase; the dataclasses use snake_case and
convert with to_dict().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Endpoint paths (relative to FINVU_BASE_URL)
# ---------------------------------------------------------------------------

LOGIN_PATH = "/User/Login"
CONSENT_REQUEST_PATH = "/ConsentRequestPlus"
ENCRYPT_LSP_CONSENT_PATH = "/EncryptLspConsentRequest"


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

@dataclass
class EnvelopeHeader:
    rid: str
    ts: str
    channel_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"rid": self.rid, "ts": self.ts, "channelId": self.channel_id}


@dataclass
class RequestEnvelope:
    header: EnvelopeHeader
    body: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"header": self.header.to_dict(), "body": self.body}


# ---------------------------------------------------------------------------
# Consent generation
# ---------------------------------------------------------------------------

@dataclass
class ConsentPurpose:
    category_type: str
    code: str
    ref_uri: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Category": {"type": self.category_type},
            "code": self.code,
            "refUri": self.ref_uri,
            "text": self.text,
        }

    def merged_with(self, override: Optional[Dict[str, Any]]) -> "ConsentPurpose":
        """Apply a partial wire-format override ({"Category": {"type"}, "code", ...})."""
        if not override:
            return self
        category = override.get("Category") or {}
        return ConsentPurpose(
            category_type=category.get("type") or self.category_type,
            code=override.get("code") or self.code,
            ref_uri=override.get("refUri") or self.ref_uri,
            text=override.get("text") or self.text,
        )


@dataclass
class ConsentGenerateRequest:
    cust_id: str
    template_name: Optional[str] = None
    consent_description: Optional[str] = None
    redirect_url: Optional[str] = None
    purpose: Optional[Dict[str, Any]] = None
    fip: Optional[List[str]] = None


@dataclass
class ConsentGenerateResponse:
    consent_handler: Optional[str]
    encrypted_request: Optional[str]
    request_date: Optional[str]
    encrypted_fiu_id: Optional[str]
    url: Optional[str]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "consentHandler": self.consent_handler,
            "encryptedRequest": self.encrypted_request,
            "requestDate": self.request_date,
            "encryptedFiuId": self.encrypted_fiu_id,
            "url": self.url,
        }


# ---------------------------------------------------------------------------
# Consent verification (bind consent handles to an LSP)
# ---------------------------------------------------------------------------

@dataclass
class ConsentVerifyRequest:
    user_id: Optional[str] = None
    consent_handles: Optional[List[str]] = None
    lsp_id: Optional[str] = None
    return_url: Optional[str] = None
    redirect_url: Optional[str] = None
    transaction_id: Optional[str] = None  # session key


@dataclass
class ConsentVerifyResponse:
    url: Optional[str]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"url": self.url}


@dataclass
class ResolvedVerifyFields:
    """Values actually sent to EncryptLspConsentRequest after fallbacks."""
    lsp_id: str
    consent_handles: List[str]
    user_id: Optional[str]
    redirect_url: str
    return_url: str
    used_session: bool = False

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "lspId": self.lsp_id,
            "consentHandles": list(self.consent_handles),
        }
        # An unresolved identifier is omitted rather than sent as null.
        if self.user_id is not None:
            body["userId"] = self.user_id
        body["url"] = self.redirect_url
        body["returnUrl"] = self.return_url
        return body


# ---------------------------------------------------------------------------
# Abstract network client
# ---------------------------------------------------------------------------

class AANetworkClient(ABC):
    """Every Finvu AA network client (real or mock) must implement this interface."""

    @abstractmethod
    async def post(
        self,
        path: str,
        envelope: RequestEnvelope,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """POST an envelope to {base_url}{path} and return the decoded JSON response."""

    async def aclose(self) -> None:
        """Release any pooled connections."""
        return None


@dataclass
class RecordedCall:
    path: str
    envelope: Dict[str, Any]
    token: Optional[str] = None

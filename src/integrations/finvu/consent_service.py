"""
Consent orchestration against the Finvu AA network.

generate_consent_handler:
    login -> build ConsentRequestPlus envelope (defaults applied) -> POST
    -> project ConsentHandle, encryptedRequest, requestDate, encryptedFiuId, url

verify_consent_handler:
    login -> read session (optional) -> resolve fields via fallback chains
    -> build EncryptLspConsentRequest envelope -> POST -> project url

Both calls are single-pass and keep no state between requests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from src.integrations.contracts.finvu import (
    CONSENT_REQUEST_PATH,
    ENCRYPT_LSP_CONSENT_PATH,
    AANetworkClient,
    ConsentGenerateRequest,
    ConsentGenerateResponse,
    ConsentVerifyRequest,
    ConsentVerifyResponse,
)
from src.integrations.finvu.envelope import build_envelope
from src.integrations.finvu.errors import DownstreamError, ValidationError
from src.integrations.finvu.field_resolvers import ResolutionContext, resolve_verify_fields
from src.integrations.finvu.session_service import SessionService
from src.integrations.finvu.token_service import TokenService
from src.integrations.policy.response_wrappers import (
    normalize_consent_generate_response,
    normalize_consent_verify_response,
)
from src.utils.config_loader import FinvuConfig

logger = logging.getLogger(__name__)


class ConsentService:
    def __init__(
        self,
        client: AANetworkClient,
        token_service: TokenService,
        session_service: SessionService,
        settings: FinvuConfig,
    ) -> None:
        self.client = client
        self.token_service = token_service
        self.session_service = session_service
        self.settings = settings

    # --- Generate ------------------------------------------------------------

    def build_generate_body(self, request: ConsentGenerateRequest) -> Dict[str, Any]:
        purpose = self.settings.purpose.to_purpose().merged_with(request.purpose)
        return {
            "aaId": self.settings.aa_id,
            "consentDescription": request.consent_description or self.settings.consent_description,
            "ConsentDetails": {"Purpose": purpose.to_dict()},
            "custId": request.cust_id,
            "fip": list(request.fip or []),
            "redirectUrl": request.redirect_url or self.settings.generate_redirect_url,
            "templateName": request.template_name or self.settings.default_template,
            "userSessionId": self.settings.user_session_id,
        }

    async def generate_consent_handler(self, request: ConsentGenerateRequest) -> ConsentGenerateResponse:
        if not request.cust_id:
            raise ValidationError("custId is required", field="custId")

        token = await self.token_service.get_token()
        envelope = build_envelope(self.build_generate_body(request), channel_id=self.settings.channel_id)

        try:
            logger.info("Generating consent handler for custId=%s", request.cust_id)
            raw = await self.client.post(CONSENT_REQUEST_PATH, envelope, token=token)
            normalized = normalize_consent_generate_response(raw)
        except DownstreamError as e:
            logger.error("Failed to generate consent handler for custId=%s: %s", request.cust_id, e)
            raise DownstreamError(
                f"Failed to generate consent handler: {e}",
                status_code=e.status_code,
                payload=e.payload,
            ) from e

        result = ConsentGenerateResponse(
            consent_handler=normalized.consent_handler,
            encrypted_request=normalized.encrypted_request,
            request_date=normalized.request_date,
            encrypted_fiu_id=normalized.encrypted_fiu_id,
            url=normalized.url,
        )
        logger.info(
            "Consent handler generated: custId=%s consentHandler=%s",
            request.cust_id,
            result.consent_handler,
        )
        return result

    # --- Verify --------------------------------------------------------------

    async def verify_consent_handler(self, request: ConsentVerifyRequest) -> ConsentVerifyResponse:
        token = await self.token_service.get_token()

        session = None
        session_key = request.transaction_id
        if session_key:
            session = await self.session_service.get_session_data(session_key)

        fields = resolve_verify_fields(
            ResolutionContext(
                request=request,
                session=session,
                lsp_id=self.settings.lsp_id,
                redirect_url=self.settings.redirect_url,
                return_url=self.settings.return_url,
                customer_id_suffix=self.settings.customer_id_suffix,
            )
        )
        envelope = build_envelope(fields.to_body(), channel_id=self.settings.channel_id)

        try:
            logger.info(
                "Verifying consent handler: userId=%s handles=%s has_session=%s",
                fields.user_id,
                fields.consent_handles,
                fields.used_session,
            )
            raw = await self.client.post(ENCRYPT_LSP_CONSENT_PATH, envelope, token=token)
            normalized = normalize_consent_verify_response(raw)
        except DownstreamError as e:
            logger.error("Failed to verify consent handler: %s", e)
            raise DownstreamError(
                f"Failed to verify consent handler: {e}",
                status_code=e.status_code,
                payload=e.payload,
            ) from e

        logger.info("Consent handler verified: userId=%s url=%s", fields.user_id, normalized.url)
        return ConsentVerifyResponse(url=normalized.url)

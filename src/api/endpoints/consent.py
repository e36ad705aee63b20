import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_consent_service, get_gateway_config, get_session_cache
from src.integrations.contracts.finvu import ConsentGenerateRequest, ConsentVerifyRequest
from src.integrations.finvu.consent_service import ConsentService
from src.integrations.finvu.errors import StoreUnavailable
from src.utils.config_loader import GatewayConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "automation-finvu-aa-service"

consent_api = APIRouter()


class ConsentGenerateBody(BaseModel):
    # Upstream forms sometimes send phone-number ids as JSON numbers.
    custId: Optional[Union[str, int]] = None
    templateName: Optional[str] = None
    consentDescription: Optional[str] = None
    redirectUrl: Optional[str] = None
    purpose: Optional[Dict[str, Any]] = None
    fip: Optional[List[str]] = None


class ConsentVerifyBody(BaseModel):
    userId: Optional[Union[str, int]] = None
    consentHandles: Optional[List[str]] = None
    lspId: Optional[str] = None
    returnUrl: Optional[str] = None
    redirectUrl: Optional[str] = None
    transactionId: Optional[str] = None


def _as_str(value: Optional[Union[str, int]]) -> Optional[str]:
    return None if value is None else str(value)


@consent_api.post("/consent/generate", tags=["Consent"])
async def generate_consent(
    body: Optional[ConsentGenerateBody] = None,
    service: ConsentService = Depends(get_consent_service),
):
    body = body or ConsentGenerateBody()
    logger.info("Incoming request to /consent/generate: custId=%s templateName=%s", body.custId, body.templateName)

    result = await service.generate_consent_handler(
        ConsentGenerateRequest(
            cust_id=_as_str(body.custId),
            template_name=body.templateName,
            consent_description=body.consentDescription,
            redirect_url=body.redirectUrl,
            purpose=body.purpose,
            fip=body.fip,
        )
    )
    return result.to_dict()


@consent_api.post("/consent/verify", tags=["Consent"])
async def verify_consent(
    body: Optional[ConsentVerifyBody] = None,
    transaction_id: Optional[str] = Query(default=None),
    service: ConsentService = Depends(get_consent_service),
):
    body = body or ConsentVerifyBody()
    # Session key may come from the body or the query string; body wins.
    session_key = body.transactionId or transaction_id

    result = await service.verify_consent_handler(
        ConsentVerifyRequest(
            user_id=_as_str(body.userId),
            consent_handles=body.consentHandles,
            lsp_id=body.lspId,
            return_url=body.returnUrl,
            redirect_url=body.redirectUrl,
            transaction_id=session_key,
        )
    )
    return result.to_dict()


async def probe_session_store(cache, key: str, ttl: int) -> None:
    """Round-trip a probe key through the store. Raises StoreUnavailable on any failure."""
    try:
        if not await cache.set_key(key, "OK", ttl):
            raise StoreUnavailable("Failed to set key")
        if await cache.get_key(key) != "OK":
            raise StoreUnavailable("Failed to read back key")
        await cache.delete_key(key)
    except StoreUnavailable:
        raise
    except Exception as exc:
        raise StoreUnavailable(str(exc)) from exc


@consent_api.get("/health", tags=["Health"])
async def health_check(
    cache=Depends(get_session_cache),
    config: GatewayConfig = Depends(get_gateway_config),
):
    redis_status, redis_error = "OK", None
    try:
        await probe_session_store(
            cache,
            config.session_store.health_check_key,
            config.session_store.health_check_ttl,
        )
    except StoreUnavailable as exc:
        logger.error("Health check failed: %s", exc)
        redis_status, redis_error = "UNHEALTHY", str(exc)

    healthy = redis_status == "OK"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "OK" if healthy else "UNHEALTHY",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": {"redis": {"status": redis_status, "error": redis_error}},
        },
    )

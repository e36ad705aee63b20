"""
Real Finvu AA HTTP Client.

Purpose:
- Sends request envelopes to the Finvu AA network (login, consent request,
  LSP consent encryption)
- Returns the decoded JSON body; normalization happens in
  src/integrations/policy/response_wrappers.py

Implementation notes:
- One httpx.AsyncClient per process, created in src/api/main.py and closed on shutdown
- Fixed timeout per outbound call, no retries
- Any transport failure or non-2xx response is raised as DownstreamError

Important:
- Keep this client as the ONLY place where Finvu HTTP calls are made.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.finvu import AANetworkClient, RequestEnvelope
from src.integrations.finvu.errors import DownstreamError

logger = logging.getLogger(__name__)


class FinvuHttpClient(AANetworkClient):
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    async def post(
        self,
        path: str,
        envelope: RequestEnvelope,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("HTTP Request: POST %s rid=%s", url, envelope.header.rid)
        try:
            response = await self._client.post(url, json=envelope.to_dict(), headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error("HTTP Response Error: status=%s url=%s body=%s", status_code, url, e.response.text[:500])
            raise DownstreamError(
                f"Request failed with status code {status_code}",
                status_code=status_code,
            ) from e
        except httpx.TimeoutException as e:
            logger.error("HTTP Request timed out after %ss: %s", self.timeout_seconds, url)
            raise DownstreamError(f"Request to {path} timed out after {self.timeout_seconds}s") from e
        except httpx.RequestError as e:
            logger.error("HTTP Request Error: url=%s error=%s", url, e)
            raise DownstreamError(f"Request to {path} failed: {e}") from e

        logger.debug("HTTP Response: status=%s url=%s", response.status_code, url)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise DownstreamError(
                f"Invalid JSON in response from {path}",
                status_code=response.status_code,
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()

"""
Session store access for the consent flows.

Sessions are JSON blobs written by the upstream loan-origination workflow,
keyed by session_id or transaction_id. Store failures never propagate from
here: lookups degrade to "no session" and maintenance operations return False.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from src.integrations.contracts.session import SessionRecord
from src.integrations.finvu.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self, cache):
        self.cache = cache

    async def _fetch(self, session_key: str) -> Optional[SessionRecord]:
        try:
            exists = await self.cache.key_exists(session_key)
            if not exists:
                logger.info("Session not found in store: %s", session_key)
                return None
            raw_data = await self.cache.get_key(session_key)
        except Exception as exc:
            raise StoreUnavailable(f"Session store call failed: {exc}") from exc

        if not raw_data:
            logger.info("Session data is empty: %s", session_key)
            return None
        try:
            data = json.loads(raw_data)
        except json.JSONDecodeError:
            logger.warning("Session data is not valid JSON: %s", session_key)
            return None
        if not isinstance(data, dict):
            logger.warning("Session data is not a JSON object: %s", session_key)
            return None
        return SessionRecord.from_dict(data)

    async def get_session_data(self, session_key: str) -> Optional[SessionRecord]:
        """Return the session for `session_key`, or None if absent or unreadable."""
        logger.info("Fetching session data: %s", session_key)
        try:
            record = await self._fetch(session_key)
        except StoreUnavailable as exc:
            logger.error("Failed to retrieve session data for %s: %s", session_key, exc)
            return None

        if record is not None:
            logger.info(
                "Session data retrieved: key=%s transaction_id=%s has_consent_handler=%s has_customer_id=%s",
                session_key,
                record.transaction_id,
                bool(record.consent_handler),
                bool(record.customer_id),
            )
        return record

    async def update_session_data(self, session_key: str, updates: Dict[str, Any]) -> bool:
        """Shallow-merge `updates` into an existing session. Returns False if it does not exist."""
        logger.info("Updating session data: %s", session_key)
        try:
            existing = await self._fetch(session_key)
            if existing is None:
                logger.info("Cannot update non-existent session: %s", session_key)
                return False
            merged = existing.merged(updates)
            await self.cache.set_key(session_key, json.dumps(merged.to_dict(), default=str))
        except Exception as exc:
            logger.error("Failed to update session data for %s: %s", session_key, exc)
            return False

        logger.info("Session data updated: key=%s fields=%s", session_key, sorted(updates))
        return True

    async def save_session_data(
        self,
        session_key: str,
        session_data: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        data = session_data.to_dict() if isinstance(session_data, SessionRecord) else dict(session_data)
        logger.info("Saving session data: key=%s ttl=%s", session_key, ttl)
        try:
            await self.cache.set_key(session_key, json.dumps(data, default=str), ttl)
        except Exception as exc:
            logger.error("Failed to save session data for %s: %s", session_key, exc)
            return False
        return True

    async def session_exists(self, session_key: str) -> bool:
        try:
            return bool(await self.cache.key_exists(session_key))
        except Exception as exc:
            logger.error("Failed to check session existence for %s: %s", session_key, exc)
            return False

    async def delete_session(self, session_key: str) -> bool:
        logger.info("Deleting session: %s", session_key)
        try:
            await self.cache.delete_key(session_key)
        except Exception as exc:
            logger.error("Failed to delete session %s: %s", session_key, exc)
            return False
        return True

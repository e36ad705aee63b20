"""
Finvu login.

A fresh token is requested on every orchestration call; nothing is cached.
"""

import logging

from src.integrations.contracts.finvu import LOGIN_PATH, AANetworkClient
from src.integrations.finvu.envelope import DEFAULT_CHANNEL_ID, build_envelope
from src.integrations.finvu.errors import AuthenticationError, DownstreamError
from src.integrations.policy.response_wrappers import normalize_login_response

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(
        self,
        client: AANetworkClient,
        user_id: str,
        password: str,
        channel_id: str = DEFAULT_CHANNEL_ID,
    ):
        self.client = client
        self.user_id = user_id
        self._password = password
        self.channel_id = channel_id

    async def get_token(self) -> str:
        logger.info("Fetching token from Finvu")
        return await self._login()

    async def _login(self) -> str:
        envelope = build_envelope(
            {"userId": self.user_id, "password": self._password},
            channel_id=self.channel_id,
        )
        try:
            raw = await self.client.post(LOGIN_PATH, envelope)
            token = normalize_login_response(raw).token
        except DownstreamError as e:
            logger.error("Finvu login failed: %s", e)
            raise AuthenticationError(f"Finvu login failed: {e}", status_code=e.status_code) from e

        logger.info("Successfully logged in to Finvu")
        return token

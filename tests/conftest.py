"""Pytest fixtures for the consent gateway tests."""

import json

import pytest

from src.database.redis import RedisCache
from src.integrations.clients.mocks.finvu import MockFinvuClient
from src.integrations.finvu.consent_service import ConsentService
from src.integrations.finvu.session_service import SessionService
from src.integrations.finvu.token_service import TokenService
from src.utils.config_loader import FinvuConfig, GatewayConfig

TEST_ENV = {
    "FINVU_BASE_URL": "https://finvu.test/ConsentapiV2/V2",
    "FINVU_USER_ID": "channel@finvu",
    "FINVU_PASSWORD": "secret",
}


@pytest.fixture
def gateway_config():
    return GatewayConfig(
        finvu=FinvuConfig(
            base_url=TEST_ENV["FINVU_BASE_URL"],
            user_id=TEST_ENV["FINVU_USER_ID"],
            password=TEST_ENV["FINVU_PASSWORD"],
        )
    )


@pytest.fixture
def cache():
    """In-memory session store stub."""
    return RedisCache()


@pytest.fixture
def finvu_client():
    return MockFinvuClient(user_id=TEST_ENV["FINVU_USER_ID"], password=TEST_ENV["FINVU_PASSWORD"])


@pytest.fixture
def consent_service(finvu_client, cache, gateway_config):
    token_service = TokenService(
        finvu_client,
        user_id=gateway_config.finvu.user_id,
        password=gateway_config.finvu.password,
    )
    return ConsentService(
        finvu_client,
        token_service=token_service,
        session_service=SessionService(cache),
        settings=gateway_config.finvu,
    )


@pytest.fixture
def store_session(cache):
    """Write a raw session blob the way the upstream workflow does."""

    async def _store(key, data):
        await cache.set_key(key, json.dumps(data))

    return _store

"""HTTP-level tests for the consent routes, health check and app wiring."""

import json

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.integrations.contracts.finvu import CONSENT_REQUEST_PATH, ENCRYPT_LSP_CONSENT_PATH, LOGIN_PATH
from src.integrations.finvu.errors import DownstreamError


class FailingCache:
    async def key_exists(self, key):
        raise ConnectionError("redis down")

    async def get_key(self, key):
        raise ConnectionError("redis down")

    async def set_key(self, key, value, ttl=None):
        raise ConnectionError("redis down")

    async def delete_key(self, key):
        raise ConnectionError("redis down")

    async def close(self):
        return None


@pytest.fixture
def app(gateway_config, cache, finvu_client):
    return create_app(config=gateway_config, session_cache=cache, finvu_client=finvu_client)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("prefix", ["", "/finvu-aa"])
def test_generate_returns_consent_fields(client, finvu_client, prefix):
    response = client.post(f"{prefix}/consent/generate", json={"custId": "9990001111@finvu"})

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"consentHandler", "encryptedRequest", "requestDate", "encryptedFiuId", "url"}
    assert finvu_client.calls_to(CONSENT_REQUEST_PATH)[0].envelope["body"]["custId"] == "9990001111@finvu"


@pytest.mark.parametrize("payload", [{}, {"custId": ""}, {"templateName": "T"}])
def test_generate_without_cust_id_returns_400_and_makes_no_call(client, finvu_client, payload):
    response = client.post("/consent/generate", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Bad Request", "message": "custId is required"}
    assert finvu_client.calls == []


def test_generate_with_empty_body_returns_400(client, finvu_client):
    response = client.post("/consent/generate")
    assert response.status_code == 400
    assert finvu_client.calls == []


def test_generate_accepts_numeric_cust_id(client, finvu_client):
    response = client.post("/consent/generate", json={"custId": 9990001111})

    assert response.status_code == 200
    assert finvu_client.calls_to(CONSENT_REQUEST_PATH)[0].envelope["body"]["custId"] == "9990001111"


def test_generate_malformed_json_returns_400(client, finvu_client):
    response = client.post(
        "/consent/generate",
        content=b"{bad",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Bad Request", "message": "Invalid request: body is not valid JSON"}
    assert finvu_client.calls == []


def test_generate_login_failure_returns_500(client, finvu_client):
    finvu_client.overrides[LOGIN_PATH] = {"header": {}, "body": {}}

    response = client.post("/consent/generate", json={"custId": "c1"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal Server Error"
    assert "login failed" in body["message"].lower()
    assert finvu_client.calls_to(CONSENT_REQUEST_PATH) == []


def test_generate_downstream_failure_returns_500(client, finvu_client):
    finvu_client.overrides[CONSENT_REQUEST_PATH] = DownstreamError("Request failed with status code 502")

    response = client.post("/consent/generate", json={"custId": "c1"})

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to generate consent handler: Request failed with status code 502"


# ---------------------------------------------------------------------------
# Verify
# ---------------------------------------------------------------------------

def test_verify_reads_session_from_body_transaction_id(client, cache, finvu_client):
    _store(client, cache, "txn-1", {"transaction_id": "txn-1", "session_id": "s-1", "consent_handler": "H1"})

    response = client.post("/finvu-aa/consent/verify", json={"transactionId": "txn-1", "userId": "u@finvu"})

    assert response.status_code == 200
    assert response.json()["url"]
    body = finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH)[0].envelope["body"]
    assert body["consentHandles"] == ["H1"]
    assert body["returnUrl"].endswith("session_id=s-1&transaction_id=txn-1")


def test_verify_accepts_transaction_id_query_parameter(client, cache, finvu_client):
    _store(client, cache, "txn-q", {"consent_handler": "HQ"})

    response = client.post("/consent/verify?transaction_id=txn-q", json={})

    assert response.status_code == 200
    body = finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH)[0].envelope["body"]
    assert body["consentHandles"] == ["HQ"]


def test_verify_body_transaction_id_wins_over_query(client, cache, finvu_client):
    _store(client, cache, "from-body", {"consent_handler": "HB"})
    _store(client, cache, "from-query", {"consent_handler": "HQ"})

    client.post("/consent/verify?transaction_id=from-query", json={"transactionId": "from-body"})

    body = finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH)[0].envelope["body"]
    assert body["consentHandles"] == ["HB"]


def test_verify_without_any_fields_still_succeeds(client, finvu_client):
    response = client.post("/consent/verify", json={})

    assert response.status_code == 200
    body = finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH)[0].envelope["body"]
    assert body["consentHandles"] == []
    assert "session_id=undefined" in body["returnUrl"]


def test_verify_accepts_numeric_user_id(client, finvu_client):
    response = client.post("/consent/verify", json={"userId": 9990001111})

    assert response.status_code == 200
    assert finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH)[0].envelope["body"]["userId"] == "9990001111"


def test_verify_rejects_non_list_consent_handles_with_400(client, finvu_client):
    response = client.post("/consent/verify", json={"consentHandles": "H1"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Bad Request"
    assert body["message"].startswith("Invalid request: consentHandles")
    assert finvu_client.calls == []


def test_verify_with_failing_store_still_succeeds(gateway_config, finvu_client):
    app = create_app(
        config=gateway_config,
        session_cache=FailingCache(),
        finvu_client=finvu_client,
        check_store_on_startup=False,
    )
    with TestClient(app) as client:
        response = client.post("/consent/verify", json={"transactionId": "txn-1"})

    assert response.status_code == 200
    assert finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH)[0].envelope["body"]["consentHandles"] == []


def test_verify_login_failure_returns_500(client, finvu_client):
    finvu_client.overrides[LOGIN_PATH] = {"body": {}}

    response = client.post("/consent/verify", json={"userId": "u"})

    assert response.status_code == 500
    assert "login failed" in response.json()["message"].lower()
    assert finvu_client.calls_to(ENCRYPT_LSP_CONSENT_PATH) == []


# ---------------------------------------------------------------------------
# Health, root, 404
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("path", ["/health", "/finvu-aa/health"])
def test_health_ok_cleans_up_probe_key(client, cache, path):
    response = client.get(path)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["dependencies"]["redis"] == {"status": "OK", "error": None}
    assert client.portal.call(cache.key_exists, "__health_check__") is False


def test_health_unhealthy_when_store_fails(gateway_config, finvu_client):
    app = create_app(
        config=gateway_config,
        session_cache=FailingCache(),
        finvu_client=finvu_client,
        check_store_on_startup=False,
    )
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "UNHEALTHY"
    assert data["dependencies"]["redis"]["status"] == "UNHEALTHY"
    assert "redis down" in data["dependencies"]["redis"]["error"]


def test_startup_fails_when_store_unreachable(gateway_config, finvu_client):
    app = create_app(config=gateway_config, session_cache=FailingCache(), finvu_client=finvu_client)

    with pytest.raises(Exception) as exc_info:
        with TestClient(app):
            pass

    assert "Redis is not running or not accessible" in str(exc_info.value)


def test_root_lists_endpoints(client):
    data = client.get("/").json()
    assert data["status"] == "running"
    assert data["endpoints"]["generate"] == "POST /finvu-aa/consent/generate"


def test_unknown_route_returns_json_404(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found", "message": "Route GET /nope not found"}


def _store(client, cache, key, data):
    client.portal.call(cache.set_key, key, json.dumps(data))

"""
Unit tests for the Claims service HTTP surface.
"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from service_claims.app.main import ClaimsService, create_app, create_store
from service_claims.app.persistence.postgres import PostgresClaimStore
from service_claims.app.persistence.store import InMemoryClaimStore
from shared.config import get_config


@pytest.fixture
def config():
    """Create config using the in-memory store."""
    return get_config("claims", 8020, store_backend="memory")


@pytest.fixture
def claims_service(config):
    """Create ClaimsService instance."""
    return ClaimsService(config)


@pytest.fixture
def client(claims_service):
    """Create test client."""
    with TestClient(claims_service.app) as test_client:
        yield test_client


def upsert_body(values, user_id=1, claim_type="SubscriptionWhitelist"):
    return {"userId": user_id, "claimType": claim_type, "claimValues": values}


class TestClaimsService:
    """Test cases for ClaimsService."""

    def test_service_initialization(self, claims_service):
        """Test service initialization."""
        assert claims_service.service_name == "claims"
        assert claims_service.port == 8020
        assert isinstance(claims_service.store, InMemoryClaimStore)
        assert claims_service.claim_service.store is claims_service.store

    def test_create_store_postgres(self):
        """Test postgres backend selection."""
        store = create_store(get_config("claims", 8020, store_backend="postgres"))
        assert isinstance(store, PostgresClaimStore)

    def test_create_store_unknown(self):
        """Test unknown backends are rejected."""
        with pytest.raises(ValueError):
            create_store(get_config("claims", 8020, store_backend="sqlite"))

    def test_create_app_with_store(self, config):
        """Test an explicit store is used by the app."""
        store = InMemoryClaimStore()
        app = create_app(config, store)

        with TestClient(app) as test_client:
            test_client.post("/claim", json=upsert_body(["a"]))

        assert len(store._records) == 1

    def test_root_endpoint(self, client):
        """Test root endpoint."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "claims"
        assert data["store"] == "memory"

    def test_health_endpoint(self, client):
        """Test health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "claims"
        assert data["status"] == "ok"
        assert data["dependencies"]["store"] == "ok"

    def test_health_store_down(self, claims_service, client):
        """Test health endpoint reports a failing store."""
        with patch.object(claims_service.store, "health_check", AsyncMock(return_value=False)):
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["dependencies"]["store"] == "error"

    def test_metrics_endpoint(self, client):
        """Test Prometheus exposition includes claim counters."""
        client.post("/claim", json=upsert_body(["a"]))

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "claim_operations_total" in response.text

    def test_request_id_echoed(self, client):
        """Test request ids are echoed back."""
        response = client.get("/claim", headers={"X-Request-ID": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"

    def test_request_id_generated(self, client):
        """Test a request id is assigned when the caller sends none."""
        first = client.get("/claim").headers["X-Request-ID"]
        second = client.get("/claim").headers["X-Request-ID"]

        assert first
        assert first != second


class TestClaimRoutes:
    """Test cases for the /claim routes."""

    def test_list_empty(self, client):
        """Test listing with no claims returns an empty list."""
        response = client.get("/claim")
        assert response.status_code == 200
        assert response.json() == []

    def test_upsert_scenario(self, client):
        """Test create then merge through the API."""
        response = client.post("/claim", json=upsert_body(["topic/a"]))
        assert response.status_code == 200
        created = response.json()
        assert created["claimValues"] == ["topic/a"]
        assert created["claimType"] == "SubscriptionWhitelist"
        assert created["updatedAt"] is None

        response = client.post("/claim", json=upsert_body(["topic/a", "topic/b"]))
        assert response.status_code == 200
        merged = response.json()
        assert merged["id"] == created["id"]
        assert merged["claimValues"] == ["topic/a", "topic/b"]
        assert merged["updatedAt"] is not None
        assert merged["createdAt"] == created["createdAt"]

    def test_get_by_id(self, client):
        """Test getting a claim by id."""
        created = client.post("/claim", json=upsert_body(["a"])).json()

        response = client.get(f"/claim/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_by_id_not_found(self, client):
        """Test missing claim returns 404 echoing the id."""
        response = client.get("/claim/99")

        assert response.status_code == 404
        data = response.json()
        assert data["code"] == "NOT_FOUND"
        assert data["details"]["claim_id"] == 99

    def test_list_after_upserts(self, client):
        """Test list returns every claim."""
        client.post("/claim", json=upsert_body(["a"], user_id=1))
        client.post("/claim", json=upsert_body(["b"], user_id=2))

        response = client.get("/claim")

        assert response.status_code == 200
        assert [claim["userId"] for claim in response.json()] == [1, 2]

    def test_update_replaces_values(self, client):
        """Test PUT replaces values and keeps the path id."""
        created = client.post("/claim", json=upsert_body(["a", "b"])).json()

        response = client.put(f"/claim/{created['id']}", json=upsert_body(["c"]))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["claimValues"] == ["c"]
        assert data["createdAt"] == created["createdAt"]
        assert data["updatedAt"] is not None

    def test_update_not_found(self, client):
        """Test PUT on a missing claim returns 404 and creates nothing."""
        response = client.put("/claim/5", json=upsert_body(["a"]))

        assert response.status_code == 404
        assert response.json()["details"]["claim_id"] == 5
        assert client.get("/claim").json() == []

    def test_delete_is_idempotent(self, client):
        """Test DELETE echoes the id whether or not the claim exists."""
        created = client.post("/claim", json=upsert_body(["a"])).json()

        first = client.delete(f"/claim/{created['id']}")
        second = client.delete(f"/claim/{created['id']}")

        assert first.status_code == 200
        assert first.json() == {"id": created["id"], "deleted": True}
        assert second.status_code == 200
        assert second.json() == {"id": created["id"], "deleted": False}
        assert client.get(f"/claim/{created['id']}").status_code == 404

    def test_upsert_rejects_unknown_claim_type(self, client):
        """Test claim types outside the enumeration are rejected."""
        response = client.post("/claim", json=upsert_body(["a"], claim_type="Read"))
        assert response.status_code == 422

    def test_upsert_requires_claim_values(self, client):
        """Test a body without claimValues is rejected and creates nothing."""
        response = client.post("/claim", json={"userId": 1, "claimType": "PublishWhitelist"})

        assert response.status_code == 422
        assert client.get("/claim").json() == []

    def test_update_requires_claim_values(self, client):
        """Test PUT without claimValues is rejected and keeps the stored values."""
        created = client.post("/claim", json=upsert_body(["a", "b"])).json()

        response = client.put(
            f"/claim/{created['id']}",
            json={"userId": 1, "claimType": "SubscriptionWhitelist"}
        )

        assert response.status_code == 422
        assert client.get(f"/claim/{created['id']}").json()["claimValues"] == ["a", "b"]

    def test_storage_failure_returns_500(self, claims_service, client):
        """Test store faults become a generic 500 with the error message."""
        with patch.object(claims_service.store, "list_all", AsyncMock(side_effect=OSError("database unavailable"))):
            response = client.get("/claim")

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "STORAGE_ERROR"
        assert data["message"] == "database unavailable"

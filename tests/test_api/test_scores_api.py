"""
Tests for the score API endpoints
"""
import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from fleetscore.main import app
from fleetscore.api.deps import get_record_store
from fleetscore.infrastructure.records import RecordStore


class _UnreachableStore(RecordStore):
    def list_executions(self, *args, **kwargs):
        raise OperationalError("SELECT execution_records", {}, ConnectionRefusedError("connection refused"))


@pytest.fixture
def client(store):
    """Test client with the record store bound to the SQLite fixture"""
    app.dependency_overrides[get_record_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def recent():
    return datetime.now(timezone.utc) - timedelta(days=2)


# ── Performance / rating ────────────────────────────────────────────────────


def test_performance_endpoint(client, seed, recent):
    seed.executions("ANA LOPEZ", 2, scheduled_at=recent, phone="555-0101")
    seed.assignments("op-1", "confirmed", 2, created_at=recent)

    response = client.get("/api/v1/operatives/op-1/performance", params={"name": "Ana Lopez"})

    assert response.status_code == 200
    data = response.json()
    assert data["reliability"] == 100
    assert data["punctuality"] == 100
    assert data["completed_executions"] == 2
    assert data["identity"]["confidence"] == "exact"
    assert data["merged_names"] == []
    assert response.headers["Cache-Control"] == "private, max-age=300"


def test_performance_requires_name(client):
    response = client.get("/api/v1/operatives/op-1/performance")

    assert response.status_code == 422
    assert "name" in response.json()["detail"]


def test_rating_endpoint(client, seed, recent):
    seed.operative("op-1", "ANA LOPEZ", last_service_at=recent)
    seed.executions("ANA LOPEZ", 2, cost=1000, scope="local", scheduled_at=recent)

    response = client.get("/api/v1/operatives/op-1/rating", params={"name": "ANA LOPEZ"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert 1 <= data["stars"] <= 5
    dims = {d["key"]: d for d in data["dimensions"]}
    assert dims["client_satisfaction"]["available"] is False
    assert dims["availability"]["score"] == 100
    assert data["identity"]["confidence"] == "exact"


def test_rating_requires_name(client):
    assert client.get("/api/v1/operatives/op-1/rating", params={"name": " "}).status_code == 422


# ── Fleet ───────────────────────────────────────────────────────────────────


def test_ranking_lookup_and_batch(client, seed, recent):
    seed.executions("ANA LOPEZ", 3, scheduled_at=recent)
    seed.executions("BEN ORTIZ", 1, scheduled_at=recent)

    single = client.get("/api/v1/fleet/ranking", params={"name": "ana lopez"}).json()
    batch = client.get("/api/v1/fleet/ranking/batch").json()

    assert single["available"] is True
    assert single["basis"] == "cost"
    assert single["entry"]["position"] == 1
    assert batch["fleet_size"] == 2
    assert batch["entries"]["ANA LOPEZ"] == single["entry"]


def test_ranking_unknown_name(client, seed, recent):
    seed.executions("ANA LOPEZ", 1, scheduled_at=recent)

    data = client.get("/api/v1/fleet/ranking", params={"name": "ZULU"}).json()

    assert data["available"] is False
    assert data["entry"] is None
    assert data["identity"]["confidence"] == "none"


def test_ranking_rejects_unknown_basis(client):
    response = client.get("/api/v1/fleet/ranking/batch", params={"basis": "margin"})
    assert response.status_code == 422


def test_ranking_requires_name(client):
    assert client.get("/api/v1/fleet/ranking").status_code == 422


def test_benchmarks_endpoint(client, seed, recent):
    seed.executions("ANA LOPEZ", 3, cost=1000, distance=10, scheduled_at=recent)
    seed.executions("BEN ORTIZ", 3, cost=2000, distance=10, scheduled_at=recent)

    response = client.get("/api/v1/fleet/benchmarks", params={"name": "ANA LOPEZ"})

    assert response.status_code == 200
    data = response.json()
    assert data["available"] is True
    assert data["population_size"] == 2
    assert data["revenue_rank"] == 2
    assert data["overall_percentile"] == 50


def test_benchmarks_empty_population(client):
    data = client.get("/api/v1/fleet/benchmarks", params={"name": "ANA LOPEZ"}).json()

    assert data["available"] is False
    assert data["qualifies"] is False


# ── System ──────────────────────────────────────────────────────────────────


def test_record_store_outage_returns_503(session_factory):
    app.dependency_overrides[get_record_store] = lambda: _UnreachableStore(session_factory)
    try:
        response = TestClient(app).get("/api/v1/fleet/ranking/batch")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.text == "Record store unavailable"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"

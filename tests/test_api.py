"""Tests for the FastAPI gateway endpoints.

The coordinator is replaced by a stub so the tests exercise the HTTP and
WebSocket layer only; the cluster itself is covered in test_cluster.py.
"""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.api.metrics import metrics_service
from src.api.routes.recommend import stream_results
from src.api.state import SubscriberRegistry
from src.cluster.config import ClusterConfig
from src.cluster.models import AggregatedResult, RecommendationEnvelope


class StubCoordinator:
    """Coordinator returning a fixed envelope and recording its calls."""

    def __init__(self, envelope: RecommendationEnvelope):
        self.envelope = envelope
        self.calls = []

    async def recommend(self, categories, max_results):
        self.calls.append((list(categories), max_results))
        return self.envelope.model_copy(
            update={"results": self.envelope.results[:max_results]}
        )


@pytest.fixture
def envelope():
    return RecommendationEnvelope(
        results=[
            AggregatedResult(product_id="p2", stars=5.0, category="books"),
            AggregatedResult(product_id="p1", stars=3.0, category="electronics"),
        ],
        partitions_total=3,
        partitions_succeeded=2,
        workers_available=2,
        complete=False,
    )


@pytest.fixture
def coordinator(envelope):
    return StubCoordinator(envelope)


@pytest.fixture
def client(coordinator):
    metrics_service.reset()
    with TestClient(create_app(coordinator=coordinator)) as test_client:
        yield test_client


def test_ping_endpoint(client):
    """Test that the /ping endpoint returns correct status and JSON."""
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_recommendations_empty_before_first_cycle(client):
    response = client.get("/api/recommendations")

    assert response.status_code == 200
    assert response.json() == []


def test_post_config_runs_cycle_and_stores_results(client, coordinator):
    """Test that POST /api/config runs a cycle and GET returns its results."""
    response = client.post(
        "/api/config", json={"categories": ["books", "electronics"], "max_results": 5}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["num_results"] == 2
    assert data["complete"] is False
    assert data["partitions_succeeded"] == 2
    assert data["partitions_total"] == 3
    assert coordinator.calls == [(["books", "electronics"], 5)]

    results = client.get("/api/recommendations").json()
    assert results == [
        {"product_id": "p2", "stars": 5.0, "category": "books"},
        {"product_id": "p1", "stars": 3.0, "category": "electronics"},
    ]


def test_status_reports_completeness(client):
    assert client.get("/api/status").json()["has_results"] is False

    client.post("/api/config", json={"categories": ["books"], "max_results": 1})
    status = client.get("/api/status").json()

    assert status["has_results"] is True
    assert status["num_results"] == 1
    assert status["complete"] is False
    assert status["workers_available"] == 2


def test_post_config_invalid_body_returns_422(client):
    response = client.post("/api/config", json={"categories": "books"})

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "ValidationError"


def test_post_config_negative_max_results_returns_422(client):
    response = client.post("/api/config", json={"categories": ["books"], "max_results": -3})

    assert response.status_code == 422


def test_websocket_subscriber_receives_results(client):
    """Test that a completed cycle is pushed to WebSocket subscribers."""
    with client.websocket_connect("/ws") as websocket:
        client.post("/api/config", json={"categories": ["books"], "max_results": 1})
        pushed = websocket.receive_json()

    assert pushed == [{"product_id": "p2", "stars": 5.0, "category": "books"}]


def test_metrics_count_cycles(client):
    client.post("/api/config", json={"categories": ["books"], "max_results": 2})
    client.post("/api/config", json={"categories": ["books"], "max_results": 2})

    metrics = client.get("/metrics").json()

    assert metrics["cycle_count"] == 2
    assert metrics["degraded_cycles"] == 2
    assert metrics["partitions_total"] == 6
    assert metrics["partitions_succeeded"] == 4


def test_missing_dataset_returns_503(tmp_path):
    """Test that a missing ratings file is reported as service unavailable."""
    config = ClusterConfig(workers=["127.0.0.1:1"], data_path=str(tmp_path / "missing.csv"))
    client = TestClient(create_app(config=config))

    response = client.post("/api/config", json={"categories": ["books"], "max_results": 5})

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "DatasetError"
    assert "missing.csv" in data["details"]["path"]


def test_health_check_not_affected_by_dataset_errors(tmp_path):
    config = ClusterConfig(data_path=str(tmp_path / "missing.csv"))
    client = TestClient(create_app(config=config))

    assert client.get("/ping").json() == {"status": "ok"}


class FakeWebSocket:
    """WebSocket recording how many subscribers existed at each step."""

    def __init__(self, subscribers: SubscriberRegistry):
        self.app = SimpleNamespace(
            state=SimpleNamespace(recommendations=SimpleNamespace(subscribers=subscribers))
        )
        self.subscribers = subscribers
        self.registered_at_accept = None
        self.registered_while_open = None

    async def accept(self):
        self.registered_at_accept = len(self.subscribers)

    async def receive_text(self):
        self.registered_while_open = len(self.subscribers)
        raise WebSocketDisconnect()


def test_websocket_registered_only_after_accept():
    """Test that a subscriber joins the registry after the handshake and leaves on disconnect."""
    subscribers = SubscriberRegistry()
    websocket = FakeWebSocket(subscribers)

    asyncio.run(stream_results(websocket))

    assert websocket.registered_at_accept == 0
    assert websocket.registered_while_open == 1
    assert len(subscribers) == 0


def test_post_config_loads_dataset_on_first_request(tmp_path):
    """Test that the ratings CSV is loaded lazily and a cycle still completes."""
    csv_path = tmp_path / "reviews.csv"
    csv_path.write_text(
        "reviewer_id,product_id,stars,product_category\n"
        "u1,p1,5,books\n"
        "u1,p2,3,books\n"
    )
    config = ClusterConfig(workers=["127.0.0.1:1"], data_path=str(csv_path), probe_timeout=0.5)

    with TestClient(create_app(config=config)) as client:
        response = client.post("/api/config", json={"categories": ["books"], "max_results": 5})

    assert response.status_code == 200
    data = response.json()
    assert data["num_results"] == 0
    assert data["complete"] is False
    assert data["partitions_total"] == 1

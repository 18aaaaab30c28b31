"""API tests for the events endpoints.

Tests the complete HTTP request/response cycle:
- GET    /api/v1/events             (Server-Sent Events stream)
- GET    /api/v1/events/status
- DELETE /api/v1/events/backlog
- POST   /api/v1/events/broadcasts

Architecture:
    - FastAPI TestClient with the real app + dependency overrides
    - The stream endpoint uses in-process doubles and a short connection
      lifetime, so TestClient can read the complete body
    - Operator endpoints use the real Redis components over fakeredis,
      inside one TestClient context (one event loop for all requests)

Note:
    TestClient buffers the streaming body until the session ends, which
    happens when the configured lifetime is reached.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from fastapi.testclient import TestClient

from livefeed.client.parser import SSEParser
from livefeed.core.config import Settings, get_settings
from livefeed.core.container import (
    get_connection_counter,
    get_consumer_groups,
    get_event_publisher,
    get_logger,
    get_stream_monitor,
)
from livefeed.core.enums import ErrorCode
from livefeed.core.result import Failure, Success
from livefeed.domain.events.stream_event import EventEnvelope, StreamEntry
from livefeed.domain.value_objects import ConsumerIdentity
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.errors import StreamError
from livefeed.infrastructure.streaming import (
    RedisConnectionCounter,
    RedisConsumerGroups,
    RedisEventPublisher,
    StreamMonitor,
)
from livefeed.main import app


# =============================================================================
# Test Doubles
# =============================================================================


class StubConsumerGroups:
    """Delivers scripted batches, then idles for block_ms per read."""

    def __init__(self, batches: list[list[StreamEntry]] | None = None) -> None:
        self._batches = list(batches or [])
        self.opened: list[ConsumerIdentity] = []
        self.released: list[ConsumerIdentity] = []

    async def open_identity(self, session_id, stream):
        identity = ConsumerIdentity.for_session(session_id, stream)
        self.opened.append(identity)
        return Success(value=identity)

    async def read_next(self, identity, block_ms, count):
        if self._batches:
            return Success(value=self._batches.pop(0))
        await asyncio.sleep(block_ms / 1000)
        return Success(value=[])

    async def read_pending(self, identity, count):
        return Success(value=[])

    async def acknowledge(self, identity, entry_id):
        return Success(value=1)

    async def release(self, identity):
        self.released.append(identity)


class StubCounter:
    def __init__(self) -> None:
        self.value = 0

    async def increment(self):
        self.value += 1
        return Success(value=self.value)

    async def decrement(self):
        self.value -= 1
        return Success(value=self.value)


def stream_settings() -> Settings:
    return Settings(
        sse_stream_key="sse:stream:api-test",
        sse_block_ms=10,
        sse_heartbeat_interval_seconds=0.05,
        sse_connection_lifetime_seconds=0.2,
        sse_retry_interval_ms=1500,
    )


def parse_body(body: bytes):
    return [outcome.value for outcome in SSEParser().feed(body)]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def stub_groups():
    return StubConsumerGroups(
        batches=[
            [
                StreamEntry(
                    entry_id="1714564800000-0",
                    envelope=EventEnvelope(
                        event_type="product.updated", payload={"id": 42}
                    ),
                )
            ]
        ]
    )


@pytest.fixture
def stub_counter():
    return StubCounter()


@pytest.fixture
def stream_client(stub_groups, stub_counter, mock_logger):
    app.dependency_overrides[get_settings] = stream_settings
    app.dependency_overrides[get_consumer_groups] = lambda: stub_groups
    app.dependency_overrides[get_connection_counter] = lambda: stub_counter
    app.dependency_overrides[get_logger] = lambda: mock_logger

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def operator_client(mock_logger):
    """TestClient wired to real Redis components over fakeredis."""
    redis_client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    settings = stream_settings()
    groups = RedisConsumerGroups(redis_client, mock_logger)
    counter = RedisConnectionCounter(redis_client, mock_logger)
    publisher = RedisEventPublisher(
        redis_client, settings.sse_stream_key, settings.sse_stream_max_len, mock_logger
    )
    monitor = StreamMonitor(redis_client, groups, counter, mock_logger)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_stream_monitor] = lambda: monitor

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# Stream Endpoint Tests
# =============================================================================


@pytest.mark.api
class TestStreamEndpoint:
    """Tests for GET /api/v1/events."""

    def test_response_headers(self, stream_client):
        response = stream_client.get("/api/v1/events")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"
        assert response.headers["x-sse-session-id"].startswith("SSE_")
        assert "x-trace-id" in response.headers

    def test_preamble_then_entries(self, stream_client):
        response = stream_client.get("/api/v1/events")

        assert response.content.startswith(b"retry: 1500\n\n")
        messages = parse_body(response.content)
        assert messages[0].event == "connected"
        assert response.headers["x-sse-session-id"] in messages[0].data
        update = next(m for m in messages if m.event == "product.updated")
        assert update.data == '{"id": 42}'
        assert update.id == "1714564800000-0"

    def test_idle_connection_gets_heartbeats(self, stream_client):
        response = stream_client.get("/api/v1/events")

        assert "ping" in [m.event for m in parse_body(response.content)]

    def test_session_resources_released(self, stream_client, stub_groups, stub_counter):
        stream_client.get("/api/v1/events")

        assert len(stub_groups.opened) == 1
        assert stub_groups.released == stub_groups.opened
        assert stub_counter.value == 0

    def test_default_stream(self, stream_client, stub_groups):
        stream_client.get("/api/v1/events")

        assert stub_groups.opened[0].stream == "sse:stream:api-test"

    def test_tenant_header_selects_tenant_stream(self, stream_client, stub_groups):
        response = stream_client.get("/api/v1/events", headers={"client-id": "acme"})

        assert stub_groups.opened[0].stream == "sse:stream:tenant:acme"
        assert "sse:stream:tenant:acme" in parse_body(response.content)[0].data

    def test_invalid_tenant_rejected(self, stream_client, stub_groups):
        response = stream_client.get(
            "/api/v1/events", headers={"client-id": "not a tenant!"}
        )

        assert response.status_code == 400
        assert response.headers["content-type"] == "application/problem+json"
        body = response.json()
        assert body["errors"][0]["field"] == "client-id"
        assert stub_groups.opened == []

    def test_last_event_id_is_accepted(self, stream_client, mock_logger):
        response = stream_client.get(
            "/api/v1/events", headers={"Last-Event-ID": "1714564800000-0"}
        )

        assert response.status_code == 200
        logged = [call.args[0] for call in mock_logger.debug.call_args_list]
        assert "sse_reconnect_requested" in logged


# =============================================================================
# Operator Endpoint Tests
# =============================================================================


@pytest.mark.api
class TestOperatorEndpoints:
    """Tests for status, backlog and broadcasts."""

    def test_status_of_empty_stream(self, operator_client):
        response = operator_client.get("/api/v1/events/status")

        assert response.status_code == 200
        body = response.json()
        assert body["healthy"] is True
        assert body["redis_connected"] is True
        assert body["active_connections"] == 0
        assert body["stream"] == "sse:stream:api-test"
        assert body["length"] == 0
        assert body["config"]["block_ms"] == 10
        assert body["config"]["tenant_header"] == "client-id"

    def test_broadcast_then_status(self, operator_client):
        created = operator_client.post("/api/v1/events/broadcasts", json={})

        assert created.status_code == 201
        body = created.json()
        assert body["event_type"] == "system.broadcast"
        assert body["stream"] == "sse:stream:api-test"

        status = operator_client.get("/api/v1/events/status").json()
        assert status["length"] == 1
        assert status["last_entry_id"] == body["entry_id"]

    def test_broadcast_custom_event(self, operator_client):
        response = operator_client.post(
            "/api/v1/events/broadcasts",
            json={"event_type": "product.updated", "payload": {"id": 1}},
        )

        assert response.status_code == 201
        assert response.json()["event_type"] == "product.updated"

    def test_broadcast_to_tenant(self, operator_client):
        response = operator_client.post(
            "/api/v1/events/broadcasts", json={}, headers={"client-id": "acme"}
        )

        assert response.json()["stream"] == "sse:stream:tenant:acme"
        status = operator_client.get(
            "/api/v1/events/status", headers={"client-id": "acme"}
        ).json()
        assert status["stream"] == "sse:stream:tenant:acme"
        assert status["length"] == 1

    def test_broadcast_rejects_malformed_event_type(self, operator_client):
        response = operator_client.post(
            "/api/v1/events/broadcasts", json={"event_type": "has spaces"}
        )

        assert response.status_code == 422

    def test_clear_backlog(self, operator_client):
        for _ in range(3):
            operator_client.post("/api/v1/events/broadcasts", json={})

        response = operator_client.delete("/api/v1/events/backlog")

        assert response.status_code == 200
        assert response.json() == {"stream": "sse:stream:api-test", "removed": 3}
        assert operator_client.get("/api/v1/events/status").json()["length"] == 0


@pytest.mark.api
class TestOperatorFailures:
    """Error responses from the operator endpoints."""

    @pytest.fixture
    def failing_client(self):
        publisher = MagicMock()
        publisher.stream_key = "sse:stream:api-test"
        publisher.append = AsyncMock(
            return_value=Failure(
                error=StreamError(
                    code=ErrorCode.EVENT_LOG_UNAVAILABLE,
                    message="Failed to append event to stream",
                    infrastructure_code=InfrastructureErrorCode.STREAM_CONNECTION_ERROR,
                )
            )
        )
        monitor = MagicMock()
        monitor.clear_backlog = AsyncMock(
            return_value=Failure(
                error=StreamError(
                    code=ErrorCode.EVENT_LOG_OPERATION_FAILED,
                    message="Failed to clear stream backlog",
                    infrastructure_code=InfrastructureErrorCode.STREAM_TRIM_FAILED,
                )
            )
        )
        app.dependency_overrides[get_settings] = stream_settings
        app.dependency_overrides[get_event_publisher] = lambda: publisher
        app.dependency_overrides[get_stream_monitor] = lambda: monitor

        yield TestClient(app)

        app.dependency_overrides.clear()

    def test_broadcast_when_event_log_unavailable(self, failing_client):
        response = failing_client.post("/api/v1/events/broadcasts", json={})

        assert response.status_code == 503
        body = response.json()
        assert body["title"]
        assert body["detail"] == "Failed to append event to stream"
        assert body["instance"] == "/api/v1/events/broadcasts"

    def test_clear_backlog_failure(self, failing_client):
        response = failing_client.delete("/api/v1/events/backlog")

        assert response.status_code == 500
        assert response.headers["content-type"] == "application/problem+json"

    def test_invalid_tenant_on_status(self, failing_client):
        response = failing_client.get(
            "/api/v1/events/status", headers={"client-id": "bad:tenant"}
        )

        assert response.status_code == 400

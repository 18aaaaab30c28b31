"""Event stream request and response schemas.

Pydantic schemas for the operator endpoints under /api/v1/events. Includes:
- Request schemas (client -> API)
- Response schemas (API -> client)
- Conversion from StreamStatus / StreamHealth value objects
"""

from typing import Any

from pydantic import BaseModel, Field

from livefeed.core.config import Settings
from livefeed.domain.value_objects import GroupHealth
from livefeed.infrastructure.streaming import StreamStatus


# =============================================================================
# Request Schemas
# =============================================================================


class BroadcastRequest(BaseModel):
    """Operator test event appended to the stream."""

    event_type: str = Field(
        default="system.broadcast",
        min_length=1,
        max_length=128,
        pattern=r"^[A-Za-z0-9_.\-]+$",
        description="Dotted event type tag",
        examples=["product.updated"],
    )
    payload: dict[str, Any] = Field(
        default_factory=lambda: {"message": "test broadcast"},
        description="JSON payload delivered to every connected client",
    )


# =============================================================================
# Response Schemas
# =============================================================================


class BroadcastResponse(BaseModel):
    """Result of an operator broadcast."""

    entry_id: str = Field(..., description="Entry id assigned by Redis")
    stream: str = Field(..., description="Stream the entry was appended to")
    event_type: str = Field(..., description="Event type tag")


class BacklogClearedResponse(BaseModel):
    """Result of clearing a stream backlog."""

    stream: str = Field(..., description="Stream key")
    removed: int = Field(..., description="Entries removed")


class ConsumerStatusResponse(BaseModel):
    """One consumer inside a group."""

    name: str
    pending_count: int
    idle_ms: int


class GroupStatusResponse(BaseModel):
    """One consumer group (one open connection)."""

    name: str
    consumer_count: int
    pending_count: int
    last_delivered_id: str
    consumers: list[ConsumerStatusResponse] = Field(default_factory=list)

    @classmethod
    def from_health(cls, group: GroupHealth) -> "GroupStatusResponse":
        return cls(
            name=group.name,
            consumer_count=group.consumer_count,
            pending_count=group.pending_count,
            last_delivered_id=group.last_delivered_id,
            consumers=[
                ConsumerStatusResponse(
                    name=consumer.name,
                    pending_count=consumer.pending_count,
                    idle_ms=consumer.idle_ms,
                )
                for consumer in group.consumers
            ],
        )


class StreamConfigResponse(BaseModel):
    """Effective SSE tunables."""

    stream_key: str
    stream_max_len: int
    block_ms: int
    heartbeat_interval_seconds: float
    write_timeout_seconds: float
    connection_lifetime_seconds: float
    retry_interval_ms: int
    tenant_header: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "StreamConfigResponse":
        return cls(
            stream_key=settings.sse_stream_key,
            stream_max_len=settings.sse_stream_max_len,
            block_ms=settings.sse_block_ms,
            heartbeat_interval_seconds=settings.sse_heartbeat_interval_seconds,
            write_timeout_seconds=settings.sse_write_timeout_seconds,
            connection_lifetime_seconds=settings.sse_connection_lifetime_seconds,
            retry_interval_ms=settings.sse_retry_interval_ms,
            tenant_header=settings.sse_tenant_header,
        )


class StreamStatusResponse(BaseModel):
    """Stream introspection, connection count and configuration summary.

    Attributes:
        healthy: Redis reachable and stream readable.
        redis_connected: Redis answered PING.
        active_connections: Open SSE connections (-1 when unknown).
        stream: Stream key reported on.
        length: Retained entries.
        first_entry_id: Oldest retained entry id.
        last_entry_id: Newest entry id.
        group_count: Consumer groups (one per open connection).
        pending_total: Unacknowledged entries across groups.
        groups: Per-group detail.
        error: Why the stream is unhealthy.
        config: Effective tunables.
    """

    healthy: bool
    redis_connected: bool
    active_connections: int
    stream: str
    length: int = 0
    first_entry_id: str | None = None
    last_entry_id: str | None = None
    group_count: int = 0
    pending_total: int = 0
    groups: list[GroupStatusResponse] = Field(default_factory=list)
    error: str | None = None
    config: StreamConfigResponse

    @classmethod
    def from_status(
        cls, stream: str, status: StreamStatus, settings: Settings
    ) -> "StreamStatusResponse":
        health = status.stream
        return cls(
            healthy=status.healthy,
            redis_connected=status.redis_connected,
            active_connections=status.active_connections,
            stream=stream,
            length=health.length if health else 0,
            first_entry_id=health.first_entry_id if health else None,
            last_entry_id=health.last_entry_id if health else None,
            group_count=health.group_count if health else 0,
            pending_total=health.pending_total if health else 0,
            groups=[GroupStatusResponse.from_health(g) for g in health.groups]
            if health
            else [],
            error=status.error,
            config=StreamConfigResponse.from_settings(settings),
        )

"""Stream monitor for operator tooling.

Answers "is the event log healthy?" for the status endpoint and performs the
one administrative action operators need: clearing a stream's backlog.

Architecture:
- Uses redis.asyncio for async Redis operations
- Connectivity problems are reported inside a successful status (healthy=False)
- Returns Result types for error handling
"""

from dataclasses import dataclass
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from livefeed.core.errors import DomainError
from livefeed.core.result import Failure, Result, Success
from livefeed.domain.protocols.logger_protocol import LoggerProtocol
from livefeed.domain.value_objects import StreamHealth
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.errors import stream_error_from
from livefeed.infrastructure.streaming.connection_counter import (
    RedisConnectionCounter,
)
from livefeed.infrastructure.streaming.consumer_groups import RedisConsumerGroups


@dataclass(frozen=True, kw_only=True)
class StreamStatus:
    """Health status of the event log.

    Attributes:
        healthy: Whether Redis is reachable and the stream could be read.
        redis_connected: Whether Redis answered PING.
        active_connections: Open SSE connections, -1 when unknown.
        stream: Stream health snapshot, None when unavailable.
        error: Error message if unhealthy.
    """

    healthy: bool
    redis_connected: bool
    active_connections: int
    stream: StreamHealth | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "healthy": self.healthy,
            "redis_connected": self.redis_connected,
            "active_connections": self.active_connections,
            "stream_length": self.stream.length if self.stream else 0,
            "group_count": self.stream.group_count if self.stream else 0,
            "error": self.error,
        }


class StreamMonitor:
    """Operator-facing monitor over one Redis instance.

    Attributes:
        _redis: Async Redis client instance.
        _groups: Consumer group manager (for introspection).
        _counter: Active connection counter.
        _logger: Structured logger.
    """

    def __init__(
        self,
        redis_client: Redis,
        consumer_groups: RedisConsumerGroups,
        counter: RedisConnectionCounter,
        logger: LoggerProtocol,
    ) -> None:
        self._redis = redis_client
        self._groups = consumer_groups
        self._counter = counter
        self._logger = logger

    async def check_health(self, stream: str) -> Result[StreamStatus, DomainError]:
        """Check Redis connectivity and snapshot the stream.

        Args:
            stream: Stream key to introspect.

        Returns:
            Success(StreamStatus). Unreachable Redis is a healthy=False
            status, not a Failure.
        """
        try:
            await self._redis.ping()
        except RedisError as e:
            return Success(
                value=StreamStatus(
                    healthy=False,
                    redis_connected=False,
                    active_connections=-1,
                    error=f"Redis connection failed: {e}",
                )
            )

        active = await self._counter.current()
        active_connections = active.value if isinstance(active, Success) else -1

        match await self._groups.introspect(stream):
            case Success(value=health):
                return Success(
                    value=StreamStatus(
                        healthy=True,
                        redis_connected=True,
                        active_connections=active_connections,
                        stream=health,
                    )
                )
            case Failure(error=error):
                return Success(
                    value=StreamStatus(
                        healthy=False,
                        redis_connected=True,
                        active_connections=active_connections,
                        error=error.message,
                    )
                )

    async def clear_backlog(self, stream: str) -> Result[int, DomainError]:
        """Remove every retained entry while keeping the stream and its groups.

        Open sessions keep their group cursors and continue with entries
        appended afterwards.

        Args:
            stream: Stream key.

        Returns:
            Success(number of entries removed).
        """
        try:
            removed = await self._redis.xtrim(stream, maxlen=0, approximate=False)
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_TRIM_FAILED,
                    "Failed to clear stream backlog",
                    stream=stream,
                )
            )

        self._logger.info("stream_backlog_cleared", stream=stream, removed=removed)
        return Success(value=int(removed))

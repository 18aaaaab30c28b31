"""Active SSE connection counter.

A single Redis integer shared by every API process. Sessions increment it
once they start streaming and decrement it on teardown; the status endpoint
reads it. The counter is informational, so every operation is fail-open.
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from livefeed.core.errors import DomainError
from livefeed.core.result import Failure, Result, Success
from livefeed.domain.protocols.logger_protocol import LoggerProtocol
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.errors import stream_error_from
from livefeed.infrastructure.streaming.stream_keys import SSEStreamKeys


class RedisConnectionCounter:
    """Redis-backed counter of open SSE connections.

    Attributes:
        _redis: Async Redis client.
        _key: Counter key.
        _logger: Structured logger.
    """

    def __init__(
        self,
        redis_client: Redis,
        logger: LoggerProtocol,
        key: str | None = None,
    ) -> None:
        self._redis = redis_client
        self._logger = logger
        self._key = key or SSEStreamKeys.active_connections()

    async def increment(self) -> Result[int, DomainError]:
        """Count one more open connection."""
        try:
            value = await self._redis.incr(self._key)
        except RedisError as e:
            self._logger.warning("sse_counter_increment_failed", error=str(e))
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_CONNECTION_ERROR,
                    "Failed to increment connection counter",
                    key=self._key,
                )
            )
        return Success(value=int(value))

    async def decrement(self) -> Result[int, DomainError]:
        """Count one fewer open connection, never going below zero."""
        try:
            value = int(await self._redis.decr(self._key))
            if value < 0:
                await self._redis.set(self._key, 0)
                value = 0
        except RedisError as e:
            self._logger.warning("sse_counter_decrement_failed", error=str(e))
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_CONNECTION_ERROR,
                    "Failed to decrement connection counter",
                    key=self._key,
                )
            )
        return Success(value=value)

    async def current(self) -> Result[int, DomainError]:
        """Read the current count (0 when the key was never set)."""
        try:
            raw = await self._redis.get(self._key)
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_CONNECTION_ERROR,
                    "Failed to read connection counter",
                    key=self._key,
                )
            )
        return Success(value=max(int(raw or 0), 0))

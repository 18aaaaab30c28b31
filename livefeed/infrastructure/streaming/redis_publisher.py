"""Redis Streams event publisher.

Appends event envelopes to the shared stream (or a tenant stream) with XADD.
This is the producer seam used by request handlers and the domain event
handler.

Architecture:
    - Implements EventPublisherProtocol without inheritance (structural typing)
    - XADD with approximate MAXLEN keeps the stream bounded
    - Fail-open design: append errors are logged and returned, never raised
    - No retry: a failed append is dropped, never duplicated
"""

from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from livefeed.core.enums import ErrorCode
from livefeed.core.errors import DomainError, ValidationError
from livefeed.core.result import Failure, Result, Success
from livefeed.domain.events.stream_event import EventEnvelope
from livefeed.domain.protocols.logger_protocol import LoggerProtocol
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.errors import StreamError, stream_error_from
from livefeed.infrastructure.streaming.stream_keys import SSEStreamKeys


class RedisEventPublisher:
    """Redis implementation of EventPublisherProtocol.

    Attributes:
        _redis: Async Redis client (decode_responses=True).
        _stream_key: Default stream for untenanted appends.
        _max_len: Approximate MAXLEN applied on every append.
        _logger: Structured logger.
    """

    def __init__(
        self,
        redis_client: Redis,
        stream_key: str,
        max_len: int,
        logger: LoggerProtocol,
    ) -> None:
        """Initialize the publisher.

        Args:
            redis_client: Async Redis client instance.
            stream_key: Default stream key.
            max_len: Retention cap (approximate MAXLEN).
            logger: Structured logger.
        """
        self._redis = redis_client
        self._stream_key = stream_key
        self._max_len = max_len
        self._logger = logger

    @property
    def stream_key(self) -> str:
        """Default stream key appended to when no tenant is given."""
        return self._stream_key

    async def append(
        self,
        event_type: str,
        payload: Any,
        *,
        tenant: str | None = None,
    ) -> Result[str, DomainError]:
        """Append one envelope to the stream.

        Args:
            event_type: Dotted type tag (e.g. `product.updated`).
            payload: JSON-serializable body.
            tenant: Optional tenant id; selects `sse:stream:tenant:<id>`.

        Returns:
            Success(entry_id) or Failure. Never raises.

        Note:
            - Fail-open: the caller's operation is never affected
            - Non-blocking: returns as soon as Redis assigned an entry id
        """
        stream = SSEStreamKeys.resolve(self._stream_key, tenant)

        if not event_type or not event_type.strip():
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_EVENT_TYPE,
                    message="Event type must not be empty",
                    field="event_type",
                )
            )

        envelope = EventEnvelope(event_type=event_type, payload=payload)
        try:
            fields = envelope.to_fields()
        except (TypeError, ValueError) as e:
            self._logger.warning(
                "stream_append_serialization_failed",
                stream=stream,
                event_type=event_type,
                error=str(e),
            )
            return Failure(
                error=StreamError(
                    code=ErrorCode.INVALID_PAYLOAD,
                    message="Payload is not JSON serializable",
                    infrastructure_code=InfrastructureErrorCode.STREAM_SERIALIZATION_FAILED,
                    details={"event_type": event_type, "error": str(e)},
                )
            )

        try:
            entry_id = await self._redis.xadd(
                stream,
                fields,
                maxlen=self._max_len,
                approximate=True,
            )
        except RedisError as e:
            # Fail-open: log error but don't raise
            self._logger.warning(
                "stream_append_failed",
                stream=stream,
                event_type=event_type,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_APPEND_FAILED,
                    "Failed to append event to stream",
                    stream=stream,
                    event_type=event_type,
                )
            )
        except Exception as e:
            self._logger.error(
                "stream_append_unexpected_error",
                error=e,
                stream=stream,
                event_type=event_type,
            )
            return Failure(
                error=StreamError(
                    code=ErrorCode.EVENT_LOG_OPERATION_FAILED,
                    message="Unexpected error appending event",
                    infrastructure_code=InfrastructureErrorCode.UNEXPECTED_ERROR,
                    details={"stream": stream, "error": str(e)},
                )
            )

        entry_id = entry_id.decode() if isinstance(entry_id, bytes) else entry_id
        self._logger.debug(
            "stream_event_appended",
            stream=stream,
            event_type=event_type,
            entry_id=entry_id,
        )
        return Success(value=entry_id)

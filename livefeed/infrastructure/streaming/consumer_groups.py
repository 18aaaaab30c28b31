"""Redis consumer group manager for SSE connections.

Each SSE connection owns a dedicated consumer group over the shared stream,
holding a single consumer. Entries appended to the stream are then delivered
to every connection (fan-out) instead of being split between connections
that share a group (load-splitting).

Architecture:
    - Implements ConsumerGroupProtocol without inheritance (structural typing)
    - Every Redis call is wrapped: errors come back as Failure(StreamError)
    - Groups start at `$` so a new connection only sees entries appended
      after it opened (no historical replay)
    - Group teardown is best-effort; an abandoned group costs memory only
"""

from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError, ResponseError

from livefeed.core.constants import SSE_STREAM_TAIL_ID
from livefeed.core.enums import ErrorCode
from livefeed.core.errors import DomainError
from livefeed.core.result import Failure, Result, Success
from livefeed.domain.events.stream_event import EventEnvelope, StreamEntry
from livefeed.domain.protocols.logger_protocol import LoggerProtocol
from livefeed.domain.value_objects import (
    ConsumerHealth,
    ConsumerIdentity,
    GroupHealth,
    StreamHealth,
)
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.errors import StreamError, stream_error_from


def _is_busygroup(error: ResponseError) -> bool:
    return str(error).startswith("BUSYGROUP")


def _is_nogroup(error: ResponseError) -> bool:
    return str(error).startswith("NOGROUP")


def _as_str(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


class RedisConsumerGroups:
    """Redis implementation of ConsumerGroupProtocol.

    Attributes:
        _redis: Async Redis client (decode_responses=True).
        _logger: Structured logger.
    """

    def __init__(self, redis_client: Redis, logger: LoggerProtocol) -> None:
        """Initialize the manager.

        Args:
            redis_client: Async Redis client instance.
            logger: Structured logger.
        """
        self._redis = redis_client
        self._logger = logger

    # =========================================================================
    # Group and consumer lifecycle
    # =========================================================================

    async def ensure_group(
        self, stream: str, group: str, start_id: str = SSE_STREAM_TAIL_ID
    ) -> Result[bool, DomainError]:
        """Create a consumer group, creating the stream if needed.

        Args:
            stream: Stream key.
            group: Group name.
            start_id: First id the group will deliver after (`$` = tail).

        Returns:
            Success(True) if created, Success(False) if it already existed.
        """
        try:
            await self._redis.xgroup_create(stream, group, id=start_id, mkstream=True)
        except ResponseError as e:
            if _is_busygroup(e):
                return Success(value=False)
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_GROUP_CREATE_FAILED,
                    "Failed to create consumer group",
                    stream=stream,
                    group=group,
                )
            )
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_GROUP_CREATE_FAILED,
                    "Failed to create consumer group",
                    stream=stream,
                    group=group,
                )
            )

        self._logger.debug("stream_group_created", stream=stream, group=group)
        return Success(value=True)

    async def register_consumer(
        self, identity: ConsumerIdentity
    ) -> Result[str, DomainError]:
        """Register the identity's consumer in its group.

        Returns:
            Success(consumer_name).
        """
        try:
            await self._redis.xgroup_createconsumer(
                identity.stream, identity.group, identity.consumer
            )
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_CONSUMER_CREATE_FAILED,
                    "Failed to register consumer",
                    stream=identity.stream,
                    group=identity.group,
                    consumer=identity.consumer,
                )
            )
        return Success(value=identity.consumer)

    async def open_identity(
        self, session_id: str, stream: str
    ) -> Result[ConsumerIdentity, DomainError]:
        """Create the dedicated group and single consumer for a connection.

        The group must be new. Attaching to an existing group would make this
        connection compete with another for entries, so that case is refused.

        Args:
            session_id: Per-connection session id.
            stream: Stream key the connection reads.

        Returns:
            Success(ConsumerIdentity) or Failure(StreamError). A pre-existing
            group yields RESOURCE_CONFLICT / STREAM_GROUP_CONFLICT.
        """
        identity = ConsumerIdentity.for_session(session_id, stream)

        created = await self.ensure_group(stream, identity.group, SSE_STREAM_TAIL_ID)
        if isinstance(created, Failure):
            return created
        if not created.value:
            self._logger.warning(
                "stream_group_conflict", stream=stream, group=identity.group
            )
            return Failure(
                error=StreamError(
                    code=ErrorCode.RESOURCE_CONFLICT,
                    message="Consumer group already exists for this session",
                    infrastructure_code=InfrastructureErrorCode.STREAM_GROUP_CONFLICT,
                    details={"stream": stream, "group": identity.group},
                )
            )

        registered = await self.register_consumer(identity)
        if isinstance(registered, Failure):
            await self.release(identity)
            return registered

        return Success(value=identity)

    async def release(self, identity: ConsumerIdentity) -> None:
        """Destroy the identity's group. Failures are logged at debug only."""
        try:
            await self._redis.xgroup_destroy(identity.stream, identity.group)
        except RedisError as e:
            self._logger.debug(
                "stream_group_release_failed",
                stream=identity.stream,
                group=identity.group,
                error=str(e),
            )

    # =========================================================================
    # Reads and acknowledgements
    # =========================================================================

    async def read_next(
        self, identity: ConsumerIdentity, block_ms: int, count: int
    ) -> Result[list[StreamEntry], DomainError]:
        """Block up to block_ms for entries never delivered to this group.

        Returns:
            Success(entries); an empty list means the block timed out.
        """
        return await self._read(identity, ">", count=count, block_ms=block_ms)

    async def read_pending(
        self, identity: ConsumerIdentity, count: int
    ) -> Result[list[StreamEntry], DomainError]:
        """Re-read entries delivered to this consumer but not acknowledged."""
        return await self._read(identity, "0", count=count, block_ms=None)

    async def acknowledge(
        self, identity: ConsumerIdentity, entry_id: str
    ) -> Result[int, DomainError]:
        """Acknowledge one entry, removing it from the pending set.

        Returns:
            Success(number of entries acknowledged, 0 or 1).
        """
        try:
            acked = await self._redis.xack(identity.stream, identity.group, entry_id)
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_ACK_FAILED,
                    "Failed to acknowledge entry",
                    stream=identity.stream,
                    group=identity.group,
                    entry_id=entry_id,
                )
            )
        return Success(value=int(acked))

    async def _read(
        self,
        identity: ConsumerIdentity,
        cursor: str,
        *,
        count: int,
        block_ms: int | None,
    ) -> Result[list[StreamEntry], DomainError]:
        try:
            response = await self._redis.xreadgroup(
                identity.group,
                identity.consumer,
                {identity.stream: cursor},
                count=count,
                block=block_ms,
            )
        except ResponseError as e:
            code = (
                InfrastructureErrorCode.STREAM_GROUP_MISSING
                if _is_nogroup(e)
                else InfrastructureErrorCode.STREAM_READ_FAILED
            )
            return Failure(
                error=stream_error_from(
                    e,
                    code,
                    "Failed to read from consumer group",
                    stream=identity.stream,
                    group=identity.group,
                )
            )
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_READ_FAILED,
                    "Failed to read from consumer group",
                    stream=identity.stream,
                    group=identity.group,
                )
            )

        entries: list[StreamEntry] = []
        for entry_id, fields in _iter_raw_entries(response):
            if not fields:
                # Trimmed while pending: nothing left to deliver
                await self.acknowledge(identity, entry_id)
                continue

            decoded = EventEnvelope.from_fields(
                {_as_str(k): _as_str(v) for k, v in fields.items()}
            )
            match decoded:
                case Success(value=envelope):
                    entries.append(StreamEntry(entry_id=entry_id, envelope=envelope))
                case Failure(error=error):
                    self._logger.warning(
                        "stream_entry_malformed",
                        stream=identity.stream,
                        group=identity.group,
                        entry_id=entry_id,
                        error=error.message,
                    )
                    await self.acknowledge(identity, entry_id)

        return Success(value=entries)

    # =========================================================================
    # Introspection
    # =========================================================================

    async def introspect(
        self, stream: str, *, include_consumers: bool = True
    ) -> Result[StreamHealth, DomainError]:
        """Report stream length, boundary ids and per-group health.

        Args:
            stream: Stream key.
            include_consumers: Also collect per-consumer pending/idle detail.

        Returns:
            Success(StreamHealth). A missing stream reports length 0.
        """
        try:
            if not await self._redis.exists(stream):
                return Success(value=StreamHealth(stream=stream, length=0))

            info = await self._redis.xinfo_stream(stream)
            raw_groups = await self._redis.xinfo_groups(stream)

            groups: list[GroupHealth] = []
            for raw in raw_groups:
                name = _as_str(raw["name"])
                consumers: list[ConsumerHealth] = []
                if include_consumers:
                    for consumer in await self._redis.xinfo_consumers(stream, name):
                        consumers.append(
                            ConsumerHealth(
                                name=_as_str(consumer["name"]),
                                pending_count=int(consumer.get("pending", 0)),
                                idle_ms=int(consumer.get("idle", 0)),
                            )
                        )
                groups.append(
                    GroupHealth(
                        name=name,
                        consumer_count=int(raw.get("consumers", 0)),
                        pending_count=int(raw.get("pending", 0)),
                        last_delivered_id=_as_str(raw.get("last-delivered-id", "0-0")),
                        consumers=consumers,
                    )
                )
        except RedisError as e:
            return Failure(
                error=stream_error_from(
                    e,
                    InfrastructureErrorCode.STREAM_INFO_FAILED,
                    "Failed to introspect stream",
                    stream=stream,
                )
            )

        return Success(
            value=StreamHealth(
                stream=stream,
                length=int(info.get("length", 0)),
                first_entry_id=_entry_id_of(info.get("first-entry")),
                last_entry_id=_entry_id_of(info.get("last-entry")),
                groups=groups,
            )
        )


def _entry_id_of(entry: Any) -> str | None:
    if not entry:
        return None
    return _as_str(entry[0])


def _iter_raw_entries(response: Any) -> list[tuple[str, dict[Any, Any] | None]]:
    """Flatten an XREADGROUP reply into `(entry_id, fields)` pairs.

    RESP2 replies are `[[stream, [(id, fields), ...]]]`; RESP3 replies are
    `{stream: [[(id, fields), ...]]}`.
    """
    if not response:
        return []

    if isinstance(response, dict):
        batches = [messages for value in response.values() for messages in value]
    else:
        batches = [messages for _stream, messages in response]

    pairs: list[tuple[str, dict[Any, Any] | None]] = []
    for messages in batches:
        for entry_id, fields in messages or []:
            pairs.append((_as_str(entry_id), fields))
    return pairs

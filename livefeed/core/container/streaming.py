"""Streaming dependency factories.

Application-scoped singletons for the Redis Streams event log:
- get_event_publisher(): Append side (producer seam)
- get_consumer_groups(): Per-connection read side
- get_connection_counter(): Active SSE connection counter
- get_stream_monitor(): Operator health and backlog clearing

All of them share the client returned by get_redis().
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from livefeed.core.config import get_settings
from livefeed.core.container.infrastructure import get_logger, get_redis

if TYPE_CHECKING:
    from livefeed.infrastructure.streaming import (
        RedisConnectionCounter,
        RedisConsumerGroups,
        RedisEventPublisher,
        StreamMonitor,
    )


@lru_cache()
def get_event_publisher() -> "RedisEventPublisher":
    """Get event publisher singleton (app-scoped).

    Usage:
        publisher = get_event_publisher()
        await publisher.append("product.updated", {"id": 1})
    """
    from livefeed.infrastructure.streaming import RedisEventPublisher

    settings = get_settings()
    return RedisEventPublisher(
        redis_client=get_redis(),
        stream_key=settings.sse_stream_key,
        max_len=settings.sse_stream_max_len,
        logger=get_logger(),
    )


@lru_cache()
def get_consumer_groups() -> "RedisConsumerGroups":
    """Get consumer group manager singleton (app-scoped).

    Stateless apart from the Redis client; each SSE session passes its own
    ConsumerIdentity on every call.
    """
    from livefeed.infrastructure.streaming import RedisConsumerGroups

    return RedisConsumerGroups(redis_client=get_redis(), logger=get_logger())


@lru_cache()
def get_connection_counter() -> "RedisConnectionCounter":
    """Get active connection counter singleton (app-scoped)."""
    from livefeed.infrastructure.streaming import RedisConnectionCounter

    return RedisConnectionCounter(redis_client=get_redis(), logger=get_logger())


@lru_cache()
def get_stream_monitor() -> "StreamMonitor":
    """Get stream monitor singleton (app-scoped)."""
    from livefeed.infrastructure.streaming import StreamMonitor

    return StreamMonitor(
        redis_client=get_redis(),
        consumer_groups=get_consumer_groups(),
        counter=get_connection_counter(),
        logger=get_logger(),
    )

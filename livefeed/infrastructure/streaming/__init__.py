"""Redis Streams adapters for the SSE event log.

Exports:
    - SSEStreamKeys: Centralized stream/counter key naming
    - RedisEventPublisher: Append side (XADD)
    - RedisConsumerGroups: Per-connection read side (XGROUP/XREADGROUP/XACK)
    - RedisConnectionCounter: Active SSE connection counter
    - StreamMonitor: Operator health reporting and backlog clearing
"""

from livefeed.infrastructure.streaming.connection_counter import (
    RedisConnectionCounter,
)
from livefeed.infrastructure.streaming.consumer_groups import RedisConsumerGroups
from livefeed.infrastructure.streaming.monitor import StreamMonitor, StreamStatus
from livefeed.infrastructure.streaming.redis_publisher import RedisEventPublisher
from livefeed.infrastructure.streaming.stream_keys import SSEStreamKeys

__all__ = [
    "SSEStreamKeys",
    "RedisEventPublisher",
    "RedisConsumerGroups",
    "RedisConnectionCounter",
    "StreamMonitor",
    "StreamStatus",
]

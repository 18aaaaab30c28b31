"""Domain value objects.

Usage:
    from livefeed.domain.value_objects import ConsumerIdentity, StreamHealth
"""

from livefeed.domain.value_objects.consumer_identity import (
    ConsumerIdentity,
    new_session_id,
)
from livefeed.domain.value_objects.stream_health import (
    ConsumerHealth,
    GroupHealth,
    StreamHealth,
)

__all__ = [
    "ConsumerIdentity",
    "new_session_id",
    "StreamHealth",
    "GroupHealth",
    "ConsumerHealth",
]

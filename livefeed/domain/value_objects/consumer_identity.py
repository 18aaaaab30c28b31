"""Consumer identity value object.

Every SSE connection reads the shared stream through its own consumer group
containing exactly one consumer. Two connections sharing a group would split
entries between them instead of each receiving all of them, so the identity
is derived from the connection's session id and never reused.

Usage:
    from livefeed.domain.value_objects import ConsumerIdentity, new_session_id

    session_id = new_session_id()
    identity = ConsumerIdentity.for_session(session_id, "sse:stream:broadcast")
    identity.group     # "sse-group-SSE_20240501_120000_a1b2c3"
    identity.consumer  # "consumer-SSE_20240501_120000_a1b2c3"
"""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime

from livefeed.core.constants import (
    SSE_CONSUMER_PREFIX,
    SSE_GROUP_PREFIX,
    SSE_SESSION_PREFIX,
    SSE_SESSION_SUFFIX_BYTES,
)


def new_session_id(now: datetime | None = None) -> str:
    """Generate a per-connection session id.

    Format: `SSE_<YYYYMMDD>_<HHMMSS>_<6 hex chars>`.

    Args:
        now: Timestamp to embed (defaults to current UTC time).

    Returns:
        New session id.
    """
    moment = now or datetime.now(UTC)
    suffix = secrets.token_hex(SSE_SESSION_SUFFIX_BYTES)
    return f"{SSE_SESSION_PREFIX}_{moment:%Y%m%d_%H%M%S}_{suffix}"


@dataclass(frozen=True, slots=True, kw_only=True)
class ConsumerIdentity:
    """Where and as whom a connection reads the stream.

    Attributes:
        stream: Stream key.
        group: Consumer group dedicated to one connection.
        consumer: The single consumer inside that group.
    """

    stream: str
    group: str
    consumer: str

    @classmethod
    def for_session(cls, session_id: str, stream: str) -> "ConsumerIdentity":
        """Build the identity owned by one connection."""
        return cls(
            stream=stream,
            group=f"{SSE_GROUP_PREFIX}{session_id}",
            consumer=f"{SSE_CONSUMER_PREFIX}{session_id}",
        )

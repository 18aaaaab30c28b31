"""Consumer group manager protocol.

Owns per-connection consumer identities over the stream: creating groups,
blocking reads scoped to a group, acknowledgements and health reporting.
The SSE session depends only on this protocol, so tests can drive it with
fakeredis or a hand-written double.
"""

from typing import Protocol

from livefeed.core.errors import DomainError
from livefeed.core.result import Result
from livefeed.domain.events.stream_event import StreamEntry
from livefeed.domain.value_objects import ConsumerIdentity, StreamHealth


class ConsumerGroupProtocol(Protocol):
    """Per-connection read side of the event stream."""

    async def ensure_group(
        self, stream: str, group: str, start_id: str = "$"
    ) -> Result[bool, DomainError]:
        """Create a group if missing. Success(False) if it already existed."""
        ...

    async def register_consumer(
        self, identity: ConsumerIdentity
    ) -> Result[str, DomainError]:
        """Register the identity's consumer inside its group."""
        ...

    async def open_identity(
        self, session_id: str, stream: str
    ) -> Result[ConsumerIdentity, DomainError]:
        """Create a dedicated group and consumer for one connection."""
        ...

    async def read_next(
        self, identity: ConsumerIdentity, block_ms: int, count: int
    ) -> Result[list[StreamEntry], DomainError]:
        """Block up to block_ms for new entries. Empty list means timeout."""
        ...

    async def read_pending(
        self, identity: ConsumerIdentity, count: int
    ) -> Result[list[StreamEntry], DomainError]:
        """Re-read entries delivered to this consumer but not acknowledged."""
        ...

    async def acknowledge(
        self, identity: ConsumerIdentity, entry_id: str
    ) -> Result[int, DomainError]:
        """Acknowledge one entry. Success(count acknowledged)."""
        ...

    async def release(self, identity: ConsumerIdentity) -> None:
        """Best-effort teardown of the identity's group. Never raises."""
        ...

    async def introspect(self, stream: str) -> Result[StreamHealth, DomainError]:
        """Read-only health snapshot of the stream and its groups."""
        ...

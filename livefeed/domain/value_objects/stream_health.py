"""Read-only health snapshot of a stream and its consumer groups.

Produced by the consumer group manager's introspection and rendered by the
operator status endpoint.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, kw_only=True)
class ConsumerHealth:
    """One consumer inside a group.

    Attributes:
        name: Consumer name.
        pending_count: Entries delivered but not acknowledged.
        idle_ms: Milliseconds since the consumer last read.
    """

    name: str
    pending_count: int
    idle_ms: int


@dataclass(frozen=True, slots=True, kw_only=True)
class GroupHealth:
    """One consumer group over the stream.

    Attributes:
        name: Group name.
        consumer_count: Registered consumers.
        pending_count: Entries delivered to the group but not acknowledged.
        last_delivered_id: Group cursor.
        consumers: Per-consumer detail (may be empty if not requested).
    """

    name: str
    consumer_count: int
    pending_count: int
    last_delivered_id: str
    consumers: list[ConsumerHealth] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class StreamHealth:
    """Whole-stream snapshot.

    Attributes:
        stream: Stream key.
        length: Entries currently retained (0 when the stream does not exist).
        first_entry_id: Oldest retained entry id, if any.
        last_entry_id: Newest entry id, if any.
        groups: Health of every consumer group.
    """

    stream: str
    length: int
    first_entry_id: str | None = None
    last_entry_id: str | None = None
    groups: list[GroupHealth] = field(default_factory=list)

    @property
    def group_count(self) -> int:
        """Number of consumer groups (one per open connection)."""
        return len(self.groups)

    @property
    def pending_total(self) -> int:
        """Unacknowledged entries across all groups."""
        return sum(group.pending_count for group in self.groups)

"""Domain events and stream event types.

Usage:
    from livefeed.domain.events import EntityUpdated, EventEnvelope
"""

from livefeed.domain.events.base_event import DomainEvent
from livefeed.domain.events.entity_events import (
    EntityCreated,
    EntityDeleted,
    EntityEvent,
    EntityImported,
    EntityRestored,
    EntityUpdated,
)
from livefeed.domain.events.stream_event import (
    EventEnvelope,
    StreamEntry,
    entry_id_after,
    parse_entry_id,
)

__all__ = [
    "DomainEvent",
    "EntityEvent",
    "EntityCreated",
    "EntityUpdated",
    "EntityDeleted",
    "EntityRestored",
    "EntityImported",
    "EventEnvelope",
    "StreamEntry",
    "parse_entry_id",
    "entry_id_after",
]

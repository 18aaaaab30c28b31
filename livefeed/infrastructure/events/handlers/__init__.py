"""Domain event handlers."""

from livefeed.infrastructure.events.handlers.stream_event_handler import (
    ENTITY_EVENT_TYPES,
    StreamEventHandler,
)

__all__ = ["ENTITY_EVENT_TYPES", "StreamEventHandler"]

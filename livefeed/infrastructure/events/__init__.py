"""Domain event bus adapters and handlers."""

from livefeed.infrastructure.events.in_memory_event_bus import InMemoryEventBus

__all__ = ["InMemoryEventBus"]

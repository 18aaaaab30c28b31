"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. Subscriptions are
wired here, once, at first use.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from livefeed.core.container.infrastructure import get_logger
from livefeed.core.container.streaming import get_event_publisher

if TYPE_CHECKING:
    from livefeed.domain.protocols.event_bus_protocol import EventBusProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Subscribes StreamEventHandler to every entity lifecycle event, so
    publishing EntityCreated/Updated/Deleted/Restored/Imported appends the
    matching `<entity>.<action>` envelope to the event stream.

    Returns:
        Event bus implementing EventBusProtocol.

    Usage:
        event_bus = get_event_bus()
        await event_bus.publish(EntityUpdated(entity="product", entity_id=1, ...))
    """
    from livefeed.infrastructure.events.handlers import (
        ENTITY_EVENT_TYPES,
        StreamEventHandler,
    )
    from livefeed.infrastructure.events.in_memory_event_bus import InMemoryEventBus

    logger = get_logger()
    event_bus = InMemoryEventBus(logger=logger)

    stream_handler = StreamEventHandler(publisher=get_event_publisher(), logger=logger)
    for event_class in ENTITY_EVENT_TYPES:
        event_bus.subscribe(event_class, stream_handler.handle)

    logger.debug("event_bus_configured", handlers=len(ENTITY_EVENT_TYPES))
    return event_bus

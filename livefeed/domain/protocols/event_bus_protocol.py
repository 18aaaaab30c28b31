"""Event bus protocol (port) for domain events.

The domain defines the interface; infrastructure provides the in-memory
adapter. Entity lifecycle events are published here and fanned out to the
registered handlers, one of which appends them to the event stream.

Usage:
    >>> event_bus = get_event_bus()
    >>> await event_bus.publish(EntityCreated(entity="product", entity_id=1))
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from livefeed.domain.events.base_event import DomainEvent

# Type alias for event handler functions
EventHandler = Callable[[DomainEvent], Awaitable[None]]
"""Async handler invoked with a single event. Must not rely on ordering."""


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Key Requirements:
        1. **Fail-open**: One handler failure must NOT prevent other handlers
           from executing, and never reaches the publisher.
        2. **Async**: Handlers are coroutines.
        3. **Exact type routing**: Handlers receive only the event class they
           subscribed to (no inheritance matching).
    """

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register an async handler for one event class.

        Args:
            event_type: Event class to handle.
            handler: Coroutine function receiving the event.
        """
        ...

    async def publish(self, event: DomainEvent) -> None:
        """Publish an event to every handler registered for its type.

        Never raises. No handlers registered is a no-op.

        Args:
            event: Domain event instance.
        """
        ...

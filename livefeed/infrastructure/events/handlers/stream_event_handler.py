"""Stream event handler - bridges domain events to the SSE event stream.

Subscribes to entity lifecycle events on the event bus and appends one
stream envelope per event through the event publisher.

Architecture:
    - App-scoped singleton, subscribed once by the container
    - One envelope per event, type tag `<entity>.<action>`
    - Fail-open design: errors logged but never propagate to the bus

Lifecycle:
    1. Container creates the handler at startup
    2. Container subscribes handler.handle to every ENTITY_EVENT_TYPES class
    3. Domain code publishes EntityUpdated -> handler builds payload -> append
    4. Every open SSE session reads the new entry from its own group
"""

import json
from typing import Any

from livefeed.core.result import Failure
from livefeed.domain.events.base_event import DomainEvent
from livefeed.domain.events.entity_events import (
    EntityCreated,
    EntityDeleted,
    EntityEvent,
    EntityImported,
    EntityRestored,
    EntityUpdated,
)
from livefeed.domain.protocols.event_publisher_protocol import EventPublisherProtocol
from livefeed.domain.protocols.logger_protocol import LoggerProtocol

ENTITY_EVENT_TYPES: tuple[type[EntityEvent], ...] = (
    EntityCreated,
    EntityUpdated,
    EntityDeleted,
    EntityRestored,
    EntityImported,
)
"""Event classes the handler is subscribed to."""


class StreamEventHandler:
    """Appends entity lifecycle events to the event stream.

    Attributes:
        _publisher: Event publisher (append side of the stream).
        _logger: Structured logger.

    Example:
        >>> handler = StreamEventHandler(publisher=get_event_publisher(), logger=logger)
        >>> for event_class in ENTITY_EVENT_TYPES:
        ...     event_bus.subscribe(event_class, handler.handle)
    """

    def __init__(
        self,
        publisher: EventPublisherProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._publisher = publisher
        self._logger = logger

    async def handle(self, event: DomainEvent) -> None:
        """Append the stream envelope for an entity event.

        Non-entity events are ignored. Never raises.

        Args:
            event: Domain event from the bus.
        """
        if not isinstance(event, EntityEvent):
            return

        try:
            payload = self.build_payload(event)
            result = await self._publisher.append(
                event.type_tag, payload, tenant=event.tenant
            )
        except Exception as e:
            # Fail-open: the business operation already succeeded
            self._logger.error(
                "stream_event_handler_failed",
                error=e,
                domain_event=type(event).__name__,
                event_id=str(event.event_id),
            )
            return

        if isinstance(result, Failure):
            # Publisher already logged the cause
            return

        self._logger.debug(
            "stream_event_published",
            domain_event=type(event).__name__,
            event_type=event.type_tag,
            entry_id=result.value,
        )

    @staticmethod
    def build_payload(event: EntityEvent) -> dict[str, Any]:
        """Build the JSON payload written to the stream.

        Shape: `{"id", "entity", "attributes"}` plus `"changes"` for updates
        (`{field: {"old", "new"}}`) and `"imported_count"` for imports. Values
        that JSON cannot encode natively (datetimes, decimals) become strings.

        Args:
            event: Entity lifecycle event.

        Returns:
            JSON-safe payload.
        """
        payload: dict[str, Any] = {
            "id": event.entity_id,
            "entity": event.entity,
            "attributes": event.attributes,
        }
        if isinstance(event, EntityUpdated):
            payload["changes"] = event.changes
        if isinstance(event, EntityImported):
            payload["imported_count"] = event.imported_count

        return json.loads(json.dumps(payload, default=str))

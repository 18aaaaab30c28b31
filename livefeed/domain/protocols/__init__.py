"""Domain protocols (ports).

Infrastructure adapters satisfy these structurally; nothing inherits them.

Usage:
    from livefeed.domain.protocols import EventPublisherProtocol
"""

from livefeed.domain.protocols.consumer_group_protocol import ConsumerGroupProtocol
from livefeed.domain.protocols.event_bus_protocol import (
    EventBusProtocol,
    EventHandler,
)
from livefeed.domain.protocols.event_publisher_protocol import (
    EventPublisherProtocol,
)
from livefeed.domain.protocols.logger_protocol import LoggerProtocol

__all__ = [
    "ConsumerGroupProtocol",
    "EventBusProtocol",
    "EventHandler",
    "EventPublisherProtocol",
    "LoggerProtocol",
]

"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from livefeed.core.container import get_logger, get_event_publisher

The container is organized into modules by concern:
- infrastructure: Logging and the shared Redis client
- streaming: Event publisher, consumer groups, counter, monitor
- events: Event bus and subscriptions

FastAPI routes depend on these factories with `Depends`; tests replace them
through `app.dependency_overrides`.
"""

from livefeed.core.container.events import get_event_bus
from livefeed.core.container.infrastructure import get_logger, get_redis
from livefeed.core.container.streaming import (
    get_connection_counter,
    get_consumer_groups,
    get_event_publisher,
    get_stream_monitor,
)

__all__ = [
    "get_logger",
    "get_redis",
    "get_event_bus",
    "get_event_publisher",
    "get_consumer_groups",
    "get_connection_counter",
    "get_stream_monitor",
]

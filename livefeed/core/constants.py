"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `livefeed/core/config.py` instead.

Categories:
- Stream naming: Key prefixes and consumer identity naming
- Event names: Control events written by the server session
- Client defaults: Reconnection and staleness tuning for SSEClient
- Wire headers: Response headers required for unbuffered SSE delivery

Example:
    >>> from livefeed.core.constants import SSE_GROUP_PREFIX
    >>> group = f"{SSE_GROUP_PREFIX}{session_id}"
"""

# =============================================================================
# Stream Naming
# =============================================================================

SSE_KEY_PREFIX: str = "sse"
"""Redis key prefix for every SSE stream and counter."""

SSE_GROUP_PREFIX: str = "sse-group-"
"""Consumer group name prefix (one group per connection)."""

SSE_CONSUMER_PREFIX: str = "consumer-"
"""Consumer name prefix within a connection's dedicated group."""

SSE_SESSION_PREFIX: str = "SSE"
"""Session id prefix (SSE_YYYYMMDD_HHMMSS_<hex>)."""

SSE_SESSION_SUFFIX_BYTES: int = 3
"""Random bytes appended to a session id (3 bytes = 6 hex chars)."""

SSE_STREAM_TAIL_ID: str = "$"
"""Group start id meaning 'only entries appended after creation'."""


# =============================================================================
# Event Names
# =============================================================================

SSE_CONNECTED_EVENT: str = "connected"
"""Event written once after the preamble, carries the session id."""

SSE_HEARTBEAT_EVENT: str = "ping"
"""Heartbeat event name written when the stream is idle."""

SSE_ERROR_EVENT: str = "error"
"""Event written before a session gives up after read failures."""

SSE_DEFAULT_EVENT: str = "message"
"""Event type assumed by the client parser when no `event:` field is sent."""


# =============================================================================
# Client Defaults
# =============================================================================

SSE_CLIENT_BASE_DELAY_MS: int = 1000
"""Base reconnect delay (milliseconds) before exponential growth."""

SSE_CLIENT_MAX_DELAY_MS: int = 30000
"""Upper bound for a single reconnect delay (milliseconds)."""

SSE_CLIENT_MAX_ATTEMPTS: int = 10
"""Reconnect attempts before the client enters the failed state."""

SSE_CLIENT_STALE_AFTER_SECONDS: float = 60.0
"""Silence after which an open stream is considered dead."""

SSE_CLIENT_WATCHDOG_INTERVAL_SECONDS: float = 30.0
"""How often the client compares liveness against the staleness threshold."""

SSE_CLIENT_MAX_FRAME_BYTES: int = 1024 * 1024
"""Largest frame (bytes of accumulated data) the client parser accepts."""


# =============================================================================
# Wire Headers
# =============================================================================

SSE_MEDIA_TYPE: str = "text/event-stream"
"""Content type of an SSE response."""

SSE_RESPONSE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
"""Headers that keep proxies from buffering or caching the stream."""

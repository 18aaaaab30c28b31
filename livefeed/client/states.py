"""Connection states reported by SSEClient.

Observers registered with `on_state_change` receive only the transition
states (CONNECTED, RECONNECTING, DISCONNECTED, ERROR, FAILED). IDLE and
CONNECTING appear in `status()` only.
"""

from enum import StrEnum


class ConnectionState(StrEnum):
    """Client connection states."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    FAILED = "failed"

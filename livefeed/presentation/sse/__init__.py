"""Server side of the SSE protocol.

Exports:
    - SSESession: Per-connection streaming loop and state machine
    - SSEResponse: ASGI response that runs a session
    - format_frame / format_comment: SSE wire encoding
"""

from livefeed.presentation.sse.frames import format_comment, format_frame
from livefeed.presentation.sse.response import ASGIEventTransport, SSEResponse
from livefeed.presentation.sse.session import (
    SessionState,
    SSESession,
    SSETransport,
    TransportClosedError,
)

__all__ = [
    "ASGIEventTransport",
    "SSEResponse",
    "SSESession",
    "SSETransport",
    "SessionState",
    "TransportClosedError",
    "format_comment",
    "format_frame",
]

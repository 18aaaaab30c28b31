"""Async SSE client.

Exports:
    - SSEClient: Reconnecting client with handler registry and watchdog
    - SSEParser / SSEMessage / FrameError: Incremental wire-format parser
    - ReconnectPolicy: Exponential backoff schedule
    - ConnectionState: States reported to observers
    - HttpxChunkSource: Byte source over an httpx streaming request

Usage:
    source = HttpxChunkSource("http://localhost:8000/api/v1/events")
    client = SSEClient(source, client_id="acme")
    client.on("product.updated", handle_update)
    await client.connect()
"""

from livefeed.client.backoff import ReconnectPolicy
from livefeed.client.client import SSEClient
from livefeed.client.parser import FrameError, SSEMessage, SSEParser
from livefeed.client.states import ConnectionState
from livefeed.client.transport import (
    ChunkSource,
    HttpxChunkSource,
    StreamRejectedError,
)

__all__ = [
    "ChunkSource",
    "ConnectionState",
    "FrameError",
    "HttpxChunkSource",
    "ReconnectPolicy",
    "SSEClient",
    "SSEMessage",
    "SSEParser",
    "StreamRejectedError",
]

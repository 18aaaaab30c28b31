"""Byte sources for SSEClient.

SSEClient does not talk HTTP itself. It asks a ChunkSource to open one
connection and iterates the raw body bytes it yields; HttpxChunkSource is
the production implementation and tests substitute scripted sources.
"""

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

import httpx

from livefeed.core.constants import SSE_MEDIA_TYPE


class StreamRejectedError(Exception):
    """The server answered, but not with an event stream.

    Attributes:
        status_code: HTTP status of the response.
        retryable: False when the server asked the client to stop (204).
    """

    def __init__(self, message: str, status_code: int, retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ChunkSource(Protocol):
    """Opens one streaming connection at a time."""

    def connect(
        self, headers: dict[str, str]
    ) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Open a connection and yield an iterator over its body bytes.

        Entering the context means the server accepted the stream. Errors
        while connecting or reading propagate as exceptions.
        """
        ...


class HttpxChunkSource:
    """ChunkSource over an httpx streaming GET.

    Args:
        url: Event stream URL.
        client: Shared AsyncClient. When omitted a client is created per
            connection and closed with it.
        connect_timeout: Seconds allowed for establishing the connection.
            Reads have no timeout; the client watchdog detects stalls.
        headers: Extra headers sent on every connection.
    """

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        connect_timeout: float = 10.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._url = url
        self._client = client
        self._timeout = httpx.Timeout(connect_timeout, read=None)
        self._headers = headers or {}

    @asynccontextmanager
    async def connect(self, headers: dict[str, str]) -> AsyncIterator[AsyncIterator[bytes]]:
        request_headers = {**self._headers, **headers}
        if self._client is not None:
            async with self._open(self._client, request_headers) as chunks:
                yield chunks
            return

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            async with self._open(client, request_headers) as chunks:
                yield chunks

    @asynccontextmanager
    async def _open(
        self, client: httpx.AsyncClient, headers: dict[str, str]
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        async with client.stream(
            "GET", self._url, headers=headers, timeout=self._timeout
        ) as response:
            if response.status_code == 204:
                raise StreamRejectedError(
                    "Server closed the event stream (204 No Content)",
                    status_code=204,
                    retryable=False,
                )
            if response.status_code != 200:
                raise StreamRejectedError(
                    f"Event stream request failed with HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            content_type = response.headers.get("content-type", "")
            if not content_type.startswith(SSE_MEDIA_TYPE):
                raise StreamRejectedError(
                    f"Unexpected content type: {content_type or 'none'}",
                    status_code=response.status_code,
                )
            yield response.aiter_bytes()

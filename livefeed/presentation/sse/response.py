"""ASGI response that runs an SSE session.

StreamingResponse pulls from an async generator and only notices a vanished
client when the next chunk fails to send. SSEResponse instead hands the
session a transport whose `closed` flag is flipped by a background task
watching for `http.disconnect`, so an idle session notices within one read
block and tears down its consumer group promptly.

Every send is a separate `http.response.body` message with more_body=True,
which ASGI servers flush immediately.
"""

import asyncio
import contextlib

from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from livefeed.core.constants import SSE_MEDIA_TYPE, SSE_RESPONSE_HEADERS
from livefeed.presentation.sse.session import SSESession, TransportClosedError


class ASGIEventTransport:
    """SSETransport over an ASGI send callable."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        self._closed = True

    async def send(self, data: bytes) -> None:
        if self._closed:
            raise TransportClosedError("client disconnected")
        try:
            await self._send(
                {"type": "http.response.body", "body": data, "more_body": True}
            )
        except OSError as e:
            # uvicorn raises ClientDisconnected (an OSError) on a closed socket
            self._closed = True
            raise TransportClosedError(str(e)) from e
        except asyncio.CancelledError:
            # a frame cut off by the write timeout leaves the body unusable
            self._closed = True
            raise


class SSEResponse(Response):
    """Response whose body is produced by an SSESession.

    Args:
        session: Session to run once the response has started.
        headers: Extra headers merged over the SSE defaults.
    """

    media_type = SSE_MEDIA_TYPE

    def __init__(
        self,
        session: SSESession,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.session = session
        self.status_code = status_code
        self.background = None
        self.init_headers({**SSE_RESPONSE_HEADERS, **(headers or {})})

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        transport = ASGIEventTransport(send)
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
            }
        )

        watcher = asyncio.create_task(self._watch_disconnect(receive, transport))
        try:
            await self.session.run(transport)
        finally:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher

        if transport.closed:
            # returning without the final body makes the server drop the
            # connection, which is the forced close for a stuck client
            return
        try:
            await asyncio.wait_for(
                send({"type": "http.response.body", "body": b"", "more_body": False}),
                timeout=self.session.write_timeout,
            )
        except (OSError, TimeoutError):
            transport.mark_closed()

    @staticmethod
    async def _watch_disconnect(
        receive: Receive, transport: ASGIEventTransport
    ) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                transport.mark_closed()
                return

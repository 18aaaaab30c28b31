"""Reconnecting Server-Sent Events client.

Lifecycle:
    connect() -> CONNECTED -> (stream ends | error | stale)
        -> RECONNECTING (backoff) -> CONNECTED ...
        -> FAILED once max_attempts consecutive retries are used up
    disconnect() -> DISCONNECTED from any state

The retry counter resets whenever a connection is accepted, so a client
that reconnects successfully after the server recycled its stream starts
again at the base delay.

A watchdog checks liveness every `watchdog_interval` seconds: any completed
line (heartbeats included) counts as activity, and a connection without
activity for `stale_after` seconds is torn down and retried.

Usage:
    client = SSEClient(HttpxChunkSource(url), client_id="acme")
    client.on("product.updated", on_product_updated)
    client.on_state_change(lambda state, info: print(state, info))
    await client.connect()
    ...
    await client.close()
"""

import asyncio
import inspect
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

import structlog

from livefeed.client.backoff import ReconnectPolicy
from livefeed.client.parser import SSEMessage, SSEParser
from livefeed.client.states import ConnectionState
from livefeed.client.transport import ChunkSource, StreamRejectedError
from livefeed.core.constants import (
    SSE_CLIENT_MAX_FRAME_BYTES,
    SSE_CLIENT_STALE_AFTER_SECONDS,
    SSE_CLIENT_WATCHDOG_INTERVAL_SECONDS,
    SSE_CONNECTED_EVENT,
    SSE_HEARTBEAT_EVENT,
)
from livefeed.core.result import Failure
from livefeed.domain.protocols.logger_protocol import LoggerProtocol

type MessageHandler = Callable[[SSEMessage], Awaitable[None] | None]
type StateObserver = Callable[[ConnectionState, dict[str, Any]], Awaitable[None] | None]

CONTROL_EVENTS = frozenset({SSE_CONNECTED_EVENT, SSE_HEARTBEAT_EVENT})


class SSEClient:
    """Async SSE client with reconnect, backoff and a staleness watchdog.

    Args:
        source: Opens the underlying connection.
        policy: Reconnect backoff schedule.
        client_id: Tenant id sent as the `client-id` header.
        tenant_header: Header name carrying client_id.
        stale_after: Seconds without a completed line before a connection
            is considered dead.
        watchdog_interval: Seconds between liveness checks.
        decode_json: Decode frame data as JSON into `SSEMessage.payload`.
            Frames that are not valid JSON are discarded.
        max_frame_bytes: Largest accepted frame.
        clock: Monotonic clock used for liveness.
        sleep: Awaitable used for backoff delays.
        logger: Structured logger (structlog by default).
    """

    def __init__(
        self,
        source: ChunkSource,
        *,
        policy: ReconnectPolicy | None = None,
        client_id: str | None = None,
        tenant_header: str = "client-id",
        stale_after: float = SSE_CLIENT_STALE_AFTER_SECONDS,
        watchdog_interval: float = SSE_CLIENT_WATCHDOG_INTERVAL_SECONDS,
        decode_json: bool = True,
        max_frame_bytes: int = SSE_CLIENT_MAX_FRAME_BYTES,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: LoggerProtocol | None = None,
    ) -> None:
        self._source = source
        self._policy = policy or ReconnectPolicy()
        self._client_id = client_id
        self._tenant_header = tenant_header
        self._stale_after = stale_after
        self._watchdog_interval = watchdog_interval
        self._decode_json = decode_json
        self._clock = clock
        self._sleep = sleep
        self._logger: LoggerProtocol = logger or structlog.get_logger(__name__)
        self._parser = SSEParser(max_frame_bytes=max_frame_bytes)

        self._handlers: dict[str, list[MessageHandler]] = {}
        self._message_handlers: list[MessageHandler] = []
        self._observers: list[StateObserver] = []

        self._state = ConnectionState.IDLE
        self._closing = False
        self._attempt = 0
        self._connected = False
        self._last_activity = 0.0
        self._force_reason: str | None = None

        self._runner: asyncio.Task[None] | None = None
        self._watchdog: asyncio.Task[None] | None = None
        self._stream_task: asyncio.Task[None] | None = None

        self.received = 0
        self.malformed = 0
        self.reconnects = 0

    # =========================================================================
    # Registry
    # =========================================================================

    def on(self, event: str, handler: MessageHandler) -> None:
        """Register a handler for one event type."""
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: MessageHandler | None = None) -> None:
        """Remove one handler, or every handler of the event type."""
        if handler is None:
            self._handlers.pop(event, None)
            return
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._handlers.pop(event, None)

    def on_message(self, handler: MessageHandler) -> None:
        """Register a fallback for event types without a specific handler."""
        self._message_handlers.append(handler)

    def on_state_change(self, observer: StateObserver) -> None:
        """Register an observer called as observer(state, info)."""
        self._observers.append(observer)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def last_event_id(self) -> str | None:
        return self._parser.last_event_id

    async def connect(self) -> None:
        """Start streaming in the background. No-op while already running."""
        if self._runner is not None and not self._runner.done():
            return
        self._closing = False
        self._attempt = 0
        self._state = ConnectionState.CONNECTING
        self._runner = asyncio.create_task(self._run())
        self._watchdog = asyncio.create_task(self._watch())

    async def disconnect(self) -> None:
        """Stop streaming. Safe to call repeatedly.

        May be called from a message handler or state observer. Those run
        inside the tasks being stopped, so the DISCONNECTED transition is
        emitted first and the calling task unwinds at its next await.
        """
        self._closing = True
        tasks = [
            task
            for task in (self._watchdog, self._runner)
            if task is not None and not task.done()
        ]
        current = asyncio.current_task()
        inside = current is not None and current in (
            self._runner,
            self._watchdog,
            self._stream_task,
        )
        self._runner = None
        self._watchdog = None
        self._connected = False

        if inside:
            await self._announce_disconnect()
            for task in tasks:
                task.cancel()
            return

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self._announce_disconnect()

    async def _announce_disconnect(self) -> None:
        if self._state not in (
            ConnectionState.IDLE,
            ConnectionState.DISCONNECTED,
            ConnectionState.FAILED,
        ):
            await self._transition(ConnectionState.DISCONNECTED, reason="client")

    async def close(self) -> None:
        """Disconnect and drop every registered handler and observer."""
        await self.disconnect()
        self._handlers.clear()
        self._message_handlers.clear()
        self._observers.clear()

    async def wait_stopped(self) -> None:
        """Wait until the reconnect loop ends (FAILED or disconnect())."""
        runner = self._runner
        if runner is not None:
            await asyncio.gather(runner, return_exceptions=True)

    def status(self) -> dict[str, Any]:
        """Snapshot for diagnostics."""
        return {
            "state": self._state.value,
            "connected": self._connected,
            "attempt": self._attempt,
            "last_event_id": self._parser.last_event_id,
            "received": self.received,
            "malformed": self.malformed,
            "reconnects": self.reconnects,
            "handlers": sorted(self._handlers),
        }

    # =========================================================================
    # Watchdog
    # =========================================================================

    def check_staleness(self) -> bool:
        """Tear down the current connection if it went quiet.

        Returns:
            True if a reconnect was forced.
        """
        task = self._stream_task
        if not self._connected or task is None or task.done():
            return False
        idle = self._clock() - self._last_activity
        if idle <= self._stale_after:
            return False

        self._logger.warning(
            "sse_client_stale", idle_seconds=round(idle, 3), stale_after=self._stale_after
        )
        self._connected = False
        self._force_reason = "stale"
        task.cancel()
        return True

    async def _watch(self) -> None:
        while True:
            await asyncio.sleep(self._watchdog_interval)
            self.check_staleness()

    # =========================================================================
    # Reconnect loop
    # =========================================================================

    async def _run(self) -> None:
        while not self._closing:
            self._force_reason = None
            self._stream_task = asyncio.create_task(self._consume())
            try:
                await asyncio.wait({self._stream_task})
            finally:
                if not self._stream_task.done():
                    self._stream_task.cancel()
                    await asyncio.gather(self._stream_task, return_exceptions=True)
            self._connected = False
            if self._closing:
                return

            task = self._stream_task
            if task.cancelled():
                await self._transition(
                    ConnectionState.ERROR, reason=self._force_reason or "cancelled"
                )
            elif (error := task.exception()) is not None:
                self._logger.warning(
                    "sse_client_connection_failed",
                    error=str(error),
                    error_type=type(error).__name__,
                )
                await self._transition(
                    ConnectionState.ERROR,
                    reason="connection_failed",
                    error=str(error),
                )
                if isinstance(error, StreamRejectedError) and not error.retryable:
                    await self._give_up()
                    return
            else:
                await self._transition(ConnectionState.DISCONNECTED, reason="stream_ended")

            # an observer may have called disconnect()
            if self._closing:
                return

            self._attempt += 1
            if self._policy.exhausted(self._attempt):
                await self._give_up()
                return

            if self._parser.retry_ms:
                self._policy = self._policy.with_base_delay(self._parser.retry_ms)
            delay_ms = self._policy.delay_for(self._attempt)
            await self._transition(
                ConnectionState.RECONNECTING, attempt=self._attempt, delay_ms=delay_ms
            )
            await self._sleep(delay_ms / 1000)
            self.reconnects += 1

    async def _give_up(self) -> None:
        self._logger.error(
            "sse_client_failed",
            attempts=self._attempt,
            max_attempts=self._policy.max_attempts,
        )
        if self._watchdog is not None:
            self._watchdog.cancel()
        await self._transition(ConnectionState.FAILED, attempts=self._attempt)

    async def _consume(self) -> None:
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        if self._client_id:
            headers[self._tenant_header] = self._client_id
        if self._parser.last_event_id:
            headers["Last-Event-ID"] = self._parser.last_event_id

        self._parser.reset()
        async with self._source.connect(headers) as chunks:
            self._attempt = 0
            self._connected = True
            self._last_activity = self._clock()
            await self._transition(ConnectionState.CONNECTED)

            async for chunk in chunks:
                lines_before = self._parser.lines_seen
                outcomes = self._parser.feed(chunk)
                if self._parser.lines_seen != lines_before:
                    self._last_activity = self._clock()
                for outcome in outcomes:
                    if self._closing:
                        return
                    if isinstance(outcome, Failure):
                        self.malformed += 1
                        self._logger.warning(
                            "sse_frame_discarded", reason=outcome.error.reason
                        )
                        continue
                    await self._dispatch(outcome.value)

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def _dispatch(self, message: SSEMessage) -> None:
        if self._decode_json:
            try:
                message = replace(message, payload=json.loads(message.data))
            except ValueError:
                self.malformed += 1
                self._logger.warning(
                    "sse_frame_discarded", reason="invalid json", event=message.event
                )
                return

        self.received += 1
        handlers = self._handlers.get(message.event)
        if not handlers:
            if message.event in CONTROL_EVENTS:
                # connected and ping frames only feed liveness unless subscribed
                return
            handlers = self._message_handlers
        for handler in list(handlers):
            try:
                result = handler(message)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._logger.error(
                    "sse_client_handler_failed",
                    event_type=message.event,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    async def _transition(self, state: ConnectionState, **info: Any) -> None:
        if self._closing and state is not ConnectionState.DISCONNECTED:
            return
        self._state = state
        self._logger.debug("sse_client_state_changed", state=state.value, **info)
        for observer in list(self._observers):
            try:
                result = observer(state, info)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._logger.error(
                    "sse_client_observer_failed",
                    state=state.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )

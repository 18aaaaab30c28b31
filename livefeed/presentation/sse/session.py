"""Per-connection SSE session.

One SSESession runs for each open `GET /api/v1/events` request. It owns a
dedicated consumer group over the stream, pulls entries, writes them as SSE
frames and acknowledges each entry only after its frame was sent.

State machine:
    CONNECTING -> STREAMING -> CLOSING | FAILED -> TERMINATED

    CLOSING  normal end: client went away, write timed out, lifetime reached
    FAILED   the stream could not be read (identity refused, group vanished,
             too many consecutive read failures)

Suspension points are the blocking read (bounded by block_ms) and the frame
write (bounded by write_timeout). Teardown always releases the consumer
group and decrements the active connection counter.
"""

import asyncio
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from livefeed.core.constants import (
    SSE_CONNECTED_EVENT,
    SSE_ERROR_EVENT,
    SSE_HEARTBEAT_EVENT,
)
from livefeed.core.errors import DomainError
from livefeed.core.result import Failure, Success
from livefeed.domain.events.stream_event import StreamEntry, entry_id_after
from livefeed.domain.protocols.consumer_group_protocol import ConsumerGroupProtocol
from livefeed.domain.protocols.logger_protocol import LoggerProtocol
from livefeed.domain.value_objects import ConsumerIdentity
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.streaming.connection_counter import (
    RedisConnectionCounter,
)
from livefeed.presentation.sse.frames import format_frame, format_json_frame


class SessionState(StrEnum):
    """Lifecycle states of an SSE session."""

    CONNECTING = "connecting"
    STREAMING = "streaming"
    CLOSING = "closing"
    FAILED = "failed"
    TERMINATED = "terminated"


class TransportClosedError(Exception):
    """The client side of the connection is gone."""


class SSETransport(Protocol):
    """Outbound byte channel of one HTTP response."""

    @property
    def closed(self) -> bool:
        """True once the client disconnected."""
        ...

    async def send(self, data: bytes) -> None:
        """Write and flush bytes. Raises TransportClosedError when closed."""
        ...


def _group_missing(error: DomainError) -> bool:
    return (
        getattr(error, "infrastructure_code", None)
        == InfrastructureErrorCode.STREAM_GROUP_MISSING
    )


class SSESession:
    """Streams one consumer group to one client.

    Attributes:
        session_id: Per-connection id, also used to name the consumer group.
        stream: Stream key this connection reads.
        state: Current SessionState.
        close_reason: Why the session left STREAMING (None while streaming).
        delivered: Number of entries written to the client.
    """

    def __init__(
        self,
        *,
        session_id: str,
        stream: str,
        consumer_groups: ConsumerGroupProtocol,
        counter: RedisConnectionCounter,
        logger: LoggerProtocol,
        block_ms: int,
        read_count: int,
        heartbeat_interval: float,
        write_timeout: float,
        lifetime: float,
        max_read_failures: int,
        retry_ms: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session_id = session_id
        self.stream = stream
        self._groups = consumer_groups
        self._counter = counter
        self._logger = logger.bind(session_id=session_id, stream=stream)
        self._block_ms = block_ms
        self._read_count = read_count
        self._heartbeat_interval = heartbeat_interval
        self._write_timeout = write_timeout
        self._lifetime = lifetime
        self._max_read_failures = max_read_failures
        self._retry_ms = retry_ms
        self._clock = clock

        self.state = SessionState.CONNECTING
        self.close_reason: str | None = None
        self.delivered = 0

        self._transport: SSETransport | None = None
        self._identity: ConsumerIdentity | None = None
        self._counted = False
        self._last_write = 0.0
        self._last_delivered_id: str | None = None
        self._unacked: dict[str, None] = {}

    @property
    def write_timeout(self) -> float:
        """Seconds a single frame may stay blocked in the transport."""
        return self._write_timeout

    @property
    def identity(self) -> ConsumerIdentity | None:
        """Consumer identity while the session holds one."""
        return self._identity

    async def run(self, transport: SSETransport) -> None:
        """Run the session to completion over the given transport.

        Returns when the session reaches TERMINATED. Never raises for
        client departures or stream failures.
        """
        self._transport = transport
        started = self._clock()
        try:
            if await self._open():
                await self._stream_loop(started)
        finally:
            await self._teardown(started)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def _open(self) -> bool:
        result = await self._groups.open_identity(self.session_id, self.stream)
        if isinstance(result, Failure):
            self._logger.warning(
                "sse_session_open_failed",
                error_code=result.error.code.value,
                error=result.error.message,
            )
            await self._fail("open_failed", result.error)
            return False
        self._identity = result.value

        preamble = format_frame(retry_ms=self._retry_ms) + format_json_frame(
            SSE_CONNECTED_EVENT,
            {"session_id": self.session_id, "stream": self.stream},
        )
        if not await self._write(preamble):
            return False

        if isinstance(await self._counter.increment(), Success):
            self._counted = True

        self.state = SessionState.STREAMING
        self._logger.info("sse_session_opened", group=self._identity.group)
        return True

    def _close(self, reason: str) -> None:
        if self.state in (SessionState.CONNECTING, SessionState.STREAMING):
            self.state = SessionState.CLOSING
            self.close_reason = reason

    async def _fail(self, reason: str, error: DomainError) -> None:
        self.state = SessionState.FAILED
        self.close_reason = reason
        if self._transport is None or self._transport.closed:
            return
        frame = format_json_frame(
            SSE_ERROR_EVENT,
            {
                "code": error.code.value,
                "message": error.message,
                "reconnect": True,
            },
        )
        try:
            await asyncio.wait_for(
                self._transport.send(frame), timeout=self._write_timeout
            )
        except (TimeoutError, TransportClosedError):
            self._logger.debug("sse_error_event_not_delivered", reason=reason)

    async def _teardown(self, started: float) -> None:
        if self._identity is not None:
            await self._groups.release(self._identity)
        if self._counted:
            await self._counter.decrement()
            self._counted = False
        if self.state in (SessionState.CONNECTING, SessionState.STREAMING):
            # Cancelled from outside (server shutdown)
            self.close_reason = self.close_reason or "cancelled"

        log = self._logger.info
        if self.state == SessionState.FAILED:
            log = self._logger.warning
        log(
            "sse_session_closed",
            state=self.state.value,
            reason=self.close_reason,
            delivered=self.delivered,
            duration_seconds=round(self._clock() - started, 3),
        )
        self.state = SessionState.TERMINATED

    # =========================================================================
    # Main loop
    # =========================================================================

    async def _stream_loop(self, started: float) -> None:
        identity = self._identity
        transport = self._transport
        if identity is None or transport is None:
            return
        failures = 0
        recovering = False
        self._last_write = self._clock()

        while self.state == SessionState.STREAMING:
            if transport.closed:
                self._logger.info("sse_client_disconnected")
                self._close("client_disconnected")
                break
            if self._clock() - started >= self._lifetime:
                self._close("lifetime")
                break

            await self._retry_acks(identity)

            if recovering:
                result = await self._groups.read_pending(identity, self._read_count)
            else:
                result = await self._groups.read_next(
                    identity, self._block_ms, self._read_count
                )

            if isinstance(result, Failure):
                error = result.error
                if _group_missing(error):
                    await self._fail("group_missing", error)
                    break
                failures += 1
                self._logger.warning(
                    "sse_read_failed",
                    attempt=failures,
                    max_failures=self._max_read_failures,
                    error=error.message,
                )
                if failures >= self._max_read_failures:
                    await self._fail("read_failures", error)
                    break
                recovering = True
                await asyncio.sleep(self._block_ms / 1000)
                continue

            failures = 0
            entries = result.value
            if recovering and not entries:
                recovering = False
                continue

            if entries:
                await self._deliver(identity, entries)
            elif self._clock() - self._last_write >= self._heartbeat_interval:
                await self._heartbeat()

    async def _deliver(
        self, identity: ConsumerIdentity, entries: list[StreamEntry]
    ) -> None:
        for entry in entries:
            if not entry_id_after(entry.entry_id, self._last_delivered_id):
                # Already written before a read failure, only the ack is missing
                await self._ack(identity, entry.entry_id)
                continue

            frame = format_json_frame(
                entry.envelope.event_type,
                entry.envelope.payload,
                event_id=entry.entry_id,
            )
            if not await self._write(frame):
                return

            self._last_delivered_id = entry.entry_id
            self.delivered += 1
            await self._ack(identity, entry.entry_id)

    async def _ack(self, identity: ConsumerIdentity, entry_id: str) -> None:
        result = await self._groups.acknowledge(identity, entry_id)
        if isinstance(result, Failure):
            self._unacked[entry_id] = None
            self._logger.warning(
                "sse_ack_failed", entry_id=entry_id, error=result.error.message
            )
        else:
            self._unacked.pop(entry_id, None)

    async def _retry_acks(self, identity: ConsumerIdentity) -> None:
        for entry_id in list(self._unacked):
            result = await self._groups.acknowledge(identity, entry_id)
            if isinstance(result, Failure):
                return
            del self._unacked[entry_id]

    async def _heartbeat(self) -> None:
        await self._write(
            format_json_frame(SSE_HEARTBEAT_EVENT, {"timestamp": time.time()})
        )

    async def _write(self, frame: bytes) -> bool:
        """Send one frame. False means the session left STREAMING."""
        transport = self._transport
        if transport is None:
            return False
        try:
            await asyncio.wait_for(
                transport.send(frame), timeout=self._write_timeout
            )
        except TimeoutError:
            self._logger.warning(
                "sse_write_timeout", write_timeout_seconds=self._write_timeout
            )
            self._close("write_timeout")
            return False
        except TransportClosedError:
            self._logger.info("sse_client_disconnected")
            self._close("client_disconnected")
            return False

        self._last_write = self._clock()
        return True

    def status(self) -> dict[str, Any]:
        """Snapshot for diagnostics."""
        return {
            "session_id": self.session_id,
            "stream": self.stream,
            "state": self.state.value,
            "close_reason": self.close_reason,
            "delivered": self.delivered,
            "unacked": len(self._unacked),
        }


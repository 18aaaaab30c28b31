"""Incremental Server-Sent Events parser.

Consumes raw bytes in arbitrary chunks and produces one outcome per
completed frame. The parser never raises on malformed input: a frame with
invalid UTF-8 or exceeding the size limit becomes a Failure(FrameError) and
parsing resumes with the next frame.

Wire rules:
    - Lines end at LF; a trailing CR is dropped (so CRLF works).
    - A line starting with ':' is a comment.
    - 'field: value' with one optional space after the colon.
    - event / data / id / retry are understood, other fields are ignored.
    - A blank line dispatches the frame if at least one data line was seen.
    - The event type resets after dispatch, the last event id does not.
"""

from dataclasses import dataclass
from typing import Any

from livefeed.core.constants import SSE_CLIENT_MAX_FRAME_BYTES, SSE_DEFAULT_EVENT
from livefeed.core.enums import ErrorCode
from livefeed.core.errors import DomainError
from livefeed.core.result import Failure, Result, Success

_BOM = b"\xef\xbb\xbf"


@dataclass(frozen=True, slots=True, kw_only=True)
class SSEMessage:
    """One dispatched SSE frame.

    Attributes:
        event: Event type ('message' when the frame had no event field).
        data: Data lines joined with '\\n'.
        id: Last event id at dispatch time.
        payload: Decoded JSON data, filled in by the client.
    """

    event: str
    data: str
    id: str | None = None
    payload: Any = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FrameError(DomainError):
    """A frame that could not be decoded and was discarded."""

    code: ErrorCode = ErrorCode.STREAM_FRAME_MALFORMED
    reason: str = "malformed"


class SSEParser:
    """Stateful byte-to-frame parser for one event stream.

    Attributes:
        last_event_id: Most recent `id:` value, kept across frames and
            connections.
        retry_ms: Most recent valid `retry:` value.
        lines_seen: Count of completed lines, used as a liveness signal.
    """

    def __init__(self, max_frame_bytes: int = SSE_CLIENT_MAX_FRAME_BYTES) -> None:
        self._max_frame_bytes = max_frame_bytes
        self._buffer = bytearray()
        self._at_stream_start = True
        self.last_event_id: str | None = None
        self.retry_ms: int | None = None
        self.lines_seen = 0
        self._reset_frame()

    def _reset_frame(self) -> None:
        self._event = ""
        self._data: list[str] = []
        self._frame_bytes = 0
        self._corrupt: str | None = None

    def reset(self) -> None:
        """Drop partial input before reading a new connection.

        The last event id and retry hint survive.
        """
        self._buffer.clear()
        self._at_stream_start = True
        self._reset_frame()

    def feed(self, chunk: bytes) -> list[Result[SSEMessage, FrameError]]:
        """Consume a chunk and return the frames it completed."""
        if self._at_stream_start and chunk:
            self._buffer.extend(chunk)
            if len(self._buffer) < len(_BOM) and _BOM.startswith(bytes(self._buffer)):
                return []
            if self._buffer.startswith(_BOM):
                del self._buffer[: len(_BOM)]
            self._at_stream_start = False
        else:
            self._buffer.extend(chunk)

        outcomes: list[Result[SSEMessage, FrameError]] = []
        while (end := self._buffer.find(b"\n")) >= 0:
            line = bytes(self._buffer[:end])
            del self._buffer[: end + 1]
            if line.endswith(b"\r"):
                line = line[:-1]
            self.lines_seen += 1
            outcome = self._process_line(line)
            if outcome is not None:
                outcomes.append(outcome)

        if len(self._buffer) > self._max_frame_bytes:
            # The rest of this line is dropped with the frame it belongs to
            self._buffer.clear()
            self._corrupt = "frame exceeds maximum size"
        return outcomes

    def _process_line(self, raw: bytes) -> Result[SSEMessage, FrameError] | None:
        if not raw:
            return self._dispatch()
        if self._corrupt is not None:
            return None

        self._frame_bytes += len(raw)
        if self._frame_bytes > self._max_frame_bytes:
            self._corrupt = "frame exceeds maximum size"
            return None

        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError:
            self._corrupt = "invalid utf-8"
            return None

        if line.startswith(":"):
            return None

        field, colon, value = line.partition(":")
        if colon and value.startswith(" "):
            value = value[1:]

        match field:
            case "event":
                self._event = value
            case "data":
                self._data.append(value)
            case "id":
                if "\0" not in value:
                    self.last_event_id = value
            case "retry":
                if value.isascii() and value.isdigit():
                    self.retry_ms = int(value)
        return None

    def _dispatch(self) -> Result[SSEMessage, FrameError] | None:
        corrupt = self._corrupt
        data = self._data
        event = self._event or SSE_DEFAULT_EVENT
        self._reset_frame()

        if corrupt is not None:
            return Failure(
                error=FrameError(
                    message=f"Discarded SSE frame: {corrupt}",
                    reason=corrupt,
                )
            )
        if not data:
            return None
        return Success(
            value=SSEMessage(event=event, data="\n".join(data), id=self.last_event_id)
        )

"""SSE wire encoding.

Wire Format:
    event: <event_type>
    data: <line 1>
    data: <line 2>
    id: <entry_id>
    retry: <reconnect_ms>
    <blank line>
"""

import json
from typing import Any


def format_frame(
    event: str | None = None,
    data: str | None = None,
    *,
    event_id: str | None = None,
    retry_ms: int | None = None,
) -> bytes:
    """Encode one SSE frame.

    Multi-line data is written as one `data:` line per line, which clients
    join back with newlines.

    Args:
        event: Event name, omitted for the default `message` type.
        data: Frame data.
        event_id: Value for the `id:` field.
        retry_ms: Reconnect hint in milliseconds.

    Returns:
        UTF-8 encoded frame ending with a blank line.
    """
    lines: list[str] = []
    if event:
        lines.append(f"event: {event}")
    if data is not None:
        lines.extend(f"data: {line}" for line in data.split("\n"))
    if event_id is not None:
        lines.append(f"id: {event_id}")
    if retry_ms is not None:
        lines.append(f"retry: {retry_ms}")
    return ("\n".join(lines) + "\n\n").encode("utf-8")


def format_json_frame(
    event: str, payload: Any, *, event_id: str | None = None
) -> bytes:
    """Encode a frame whose data is the JSON encoding of payload."""
    return format_frame(event, json.dumps(payload), event_id=event_id)


def format_comment(text: str = "") -> bytes:
    """Encode a comment line (ignored by clients, keeps proxies awake)."""
    return f": {text}\n\n".encode("utf-8")

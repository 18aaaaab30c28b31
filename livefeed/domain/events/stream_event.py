"""Stream event envelope and entry types.

An EventEnvelope is what the publisher appends to the durable log. It is
stored as three flat string fields so any Redis client can read it:

    event_type  -> "product.updated"
    data        -> '{"id": 1, "changes": {...}}'   (JSON)
    emitted_at  -> "2024-05-01T12:00:00.123456+00:00"   (ISO-8601)

A StreamEntry pairs a decoded envelope with the log-assigned entry id
(`<milliseconds>-<sequence>`), which is both the ordering key and the
resumption cursor written to clients as the SSE `id:` field.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from livefeed.core.enums import ErrorCode
from livefeed.core.errors import ValidationError
from livefeed.core.result import Failure, Result, Success


@dataclass(frozen=True, kw_only=True, slots=True)
class EventEnvelope:
    """Immutable event as stored in the log.

    Attributes:
        event_type: Dotted type tag (e.g. `product.created`).
        payload: JSON-serializable body.
        emitted_at: When the envelope was built (UTC).
    """

    event_type: str
    payload: Any
    emitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_fields(self) -> dict[str, str]:
        """Serialize to stream fields.

        Returns:
            Field mapping suitable for XADD.

        Raises:
            TypeError: If the payload is not JSON serializable.
            ValueError: If the payload contains circular references.
        """
        return {
            "event_type": self.event_type,
            "data": json.dumps(self.payload),
            "emitted_at": self.emitted_at.isoformat(),
        }

    @classmethod
    def from_fields(
        cls, fields: dict[str, str]
    ) -> Result["EventEnvelope", ValidationError]:
        """Decode stream fields back into an envelope.

        Args:
            fields: Field mapping read from the stream (decoded strings).

        Returns:
            Success(EventEnvelope) or Failure(ValidationError) when a field
            is missing or cannot be decoded.
        """
        event_type = fields.get("event_type")
        if not event_type:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_EVENT_TYPE,
                    message="Stream entry has no event_type",
                    field="event_type",
                )
            )

        try:
            payload = json.loads(fields.get("data", "null"))
        except (TypeError, ValueError) as e:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_PAYLOAD,
                    message=f"Stream entry data is not valid JSON: {e}",
                    field="data",
                )
            )

        emitted_raw = fields.get("emitted_at")
        try:
            emitted_at = (
                datetime.fromisoformat(emitted_raw)
                if emitted_raw
                else datetime.now(UTC)
            )
        except ValueError:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message="Stream entry emitted_at is not ISO-8601",
                    field="emitted_at",
                )
            )

        return Success(
            value=cls(event_type=event_type, payload=payload, emitted_at=emitted_at)
        )


@dataclass(frozen=True, kw_only=True, slots=True)
class StreamEntry:
    """Envelope read back from the log together with its entry id."""

    entry_id: str
    envelope: EventEnvelope


def parse_entry_id(entry_id: str) -> tuple[int, int]:
    """Split an entry id into its comparable `(ms, seq)` parts.

    Args:
        entry_id: Id such as `1714564800123-0`. A bare `<ms>` means seq 0.

    Returns:
        Tuple of milliseconds and sequence number.

    Raises:
        ValueError: If either part is not an integer.
    """
    ms, _, seq = entry_id.partition("-")
    return int(ms), int(seq or 0)


def entry_id_after(candidate: str, cursor: str | None) -> bool:
    """True if `candidate` sorts strictly after `cursor` (None = before all)."""
    if cursor is None:
        return True
    return parse_entry_id(candidate) > parse_entry_id(cursor)

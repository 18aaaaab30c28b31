"""Event publisher protocol.

The producer seam of the streaming core: anything that changes domain state
calls `append()` and carries on. Adapters never raise from `append()`; a log
outage is reported as a Failure and logged, and the caller is free to ignore
it.
"""

from typing import Any, Protocol

from livefeed.core.errors import DomainError
from livefeed.core.result import Result


class EventPublisherProtocol(Protocol):
    """Append-only writer for the event stream."""

    async def append(
        self,
        event_type: str,
        payload: Any,
        *,
        tenant: str | None = None,
    ) -> Result[str, DomainError]:
        """Append one envelope to the stream.

        Args:
            event_type: Dotted type tag (e.g. `product.updated`).
            payload: JSON-serializable body.
            tenant: Optional tenant id; selects that tenant's stream.

        Returns:
            Success(entry_id) or Failure(error). Never raises.
        """
        ...

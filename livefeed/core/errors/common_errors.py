"""Common error classes used across layers.

Error Types:
- ValidationError: Input validation failures (bad event type, payload)

Usage:
    from livefeed.core.errors import ValidationError
    from livefeed.core.enums import ErrorCode
    from livefeed.core.result import Failure

    return Failure(error=ValidationError(
        code=ErrorCode.INVALID_EVENT_TYPE,
        message="Event type must not be empty",
        field="event_type",
    ))
"""

from dataclasses import dataclass

from livefeed.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        field: Field name that failed validation.
    """

    field: str | None = None


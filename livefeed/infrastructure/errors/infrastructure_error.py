"""Infrastructure layer error types.

Infrastructure errors represent failures of the event log backend (Redis).

Architecture:
- Infrastructure catches redis exceptions and maps them to DomainError
- Infrastructure errors inherit from DomainError (not Exception)
- Uses InfrastructureErrorCode for internal error tracking
- Maps to domain ErrorCode when flowing to domain layer
- Used with Result types for error propagation
"""

from dataclasses import dataclass
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from livefeed.core.enums import ErrorCode
from livefeed.core.errors import DomainError
from livefeed.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """Base infrastructure error.

    Attributes:
        code: Domain ErrorCode (maps from InfrastructureErrorCode).
        message: Human-readable message.
        infrastructure_code: Original infrastructure error code.
        details: Additional context.
    """

    infrastructure_code: InfrastructureErrorCode | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class StreamError(InfrastructureError):
    """Event log (Redis Streams) errors.

    Attributes:
        code: EVENT_LOG_UNAVAILABLE when Redis is unreachable,
            EVENT_LOG_OPERATION_FAILED otherwise.
        message: Human-readable message.
        infrastructure_code: Which stream operation failed.
        details: Additional context (stream, group, original error).
    """


def stream_error_from(
    exc: Exception,
    infrastructure_code: InfrastructureErrorCode,
    message: str,
    **details: Any,
) -> StreamError:
    """Map a redis exception to a StreamError.

    Connection and timeout failures become EVENT_LOG_UNAVAILABLE, anything
    else EVENT_LOG_OPERATION_FAILED.

    Args:
        exc: Exception raised by the redis client.
        infrastructure_code: Operation-specific code.
        message: Human-readable message.
        **details: Extra context (stream, group, entry_id).

    Returns:
        StreamError: Error value for a Failure.
    """
    unreachable = isinstance(exc, (RedisConnectionError, RedisTimeoutError))
    return StreamError(
        code=(
            ErrorCode.EVENT_LOG_UNAVAILABLE
            if unreachable
            else ErrorCode.EVENT_LOG_OPERATION_FAILED
        ),
        message=message,
        infrastructure_code=(
            InfrastructureErrorCode.STREAM_TIMEOUT
            if isinstance(exc, RedisTimeoutError)
            else InfrastructureErrorCode.STREAM_CONNECTION_ERROR
            if isinstance(exc, RedisConnectionError)
            else infrastructure_code
        ),
        details={**details, "error": str(exc), "error_type": type(exc).__name__},
    )

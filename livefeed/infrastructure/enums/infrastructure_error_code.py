"""Infrastructure-specific error codes.

These are internal codes for tracking event log failures.
They are mapped to domain ErrorCode when flowing to domain layer.

Categories:
- Connection errors (STREAM_CONNECTION_*, STREAM_TIMEOUT)
- Command errors (STREAM_APPEND_*, STREAM_READ_*, ...)
- Group errors (STREAM_GROUP_*)
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Infrastructure-specific error codes for the event log."""

    # Connection errors
    STREAM_CONNECTION_ERROR = "stream_connection_error"
    STREAM_TIMEOUT = "stream_timeout"

    # Command errors
    STREAM_APPEND_FAILED = "stream_append_failed"
    STREAM_SERIALIZATION_FAILED = "stream_serialization_failed"
    STREAM_READ_FAILED = "stream_read_failed"
    STREAM_ACK_FAILED = "stream_ack_failed"
    STREAM_TRIM_FAILED = "stream_trim_failed"
    STREAM_INFO_FAILED = "stream_info_failed"

    # Group errors
    STREAM_GROUP_CREATE_FAILED = "stream_group_create_failed"
    STREAM_GROUP_CONFLICT = "stream_group_conflict"
    STREAM_GROUP_MISSING = "stream_group_missing"
    STREAM_CONSUMER_CREATE_FAILED = "stream_consumer_create_failed"

    # Fallback
    UNEXPECTED_ERROR = "unexpected_error"

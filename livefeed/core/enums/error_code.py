"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Validation errors (INVALID_*, VALIDATION_*)
- Resource errors (*_NOT_FOUND)
- Conflict errors (*_CONFLICT)
- Event log errors (EVENT_LOG_*)
- Streaming errors (STREAM_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Validation errors
    INVALID_EVENT_TYPE = "invalid_event_type"
    INVALID_PAYLOAD = "invalid_payload"
    VALIDATION_FAILED = "validation_failed"

    # Resource errors
    RESOURCE_NOT_FOUND = "resource_not_found"

    # Conflict errors
    RESOURCE_CONFLICT = "resource_conflict"

    # Event log errors
    EVENT_LOG_UNAVAILABLE = "event_log_unavailable"
    EVENT_LOG_OPERATION_FAILED = "event_log_operation_failed"

    # Streaming errors
    STREAM_FRAME_MALFORMED = "stream_frame_malformed"

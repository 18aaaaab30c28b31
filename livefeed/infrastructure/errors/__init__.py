"""Infrastructure errors package.

Usage:
    from livefeed.infrastructure.errors import StreamError, stream_error_from
"""

from livefeed.infrastructure.errors.infrastructure_error import (
    InfrastructureError,
    StreamError,
    stream_error_from,
)

__all__ = [
    "InfrastructureError",
    "StreamError",
    "stream_error_from",
]

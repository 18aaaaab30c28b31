"""Infrastructure enums.

Usage:
    from livefeed.infrastructure.enums import InfrastructureErrorCode
"""

from livefeed.infrastructure.enums.infrastructure_error_code import (
    InfrastructureErrorCode,
)

__all__ = ["InfrastructureErrorCode"]

"""Core enums package.

Usage:
    from livefeed.core.enums import ErrorCode, Environment
"""

from livefeed.core.enums.environment import Environment
from livefeed.core.enums.error_code import ErrorCode

__all__ = ["ErrorCode", "Environment"]

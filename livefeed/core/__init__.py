"""Core shared kernel.

This module provides foundational utilities used across all architectural layers:
- Result types for railway-oriented programming
- Base error classes for domain-level error handling
- Error code and environment enums

The core module has NO dependencies on other application layers.
"""

from livefeed.core.errors import DomainError, ValidationError
from livefeed.core.enums import ErrorCode
from livefeed.core.result import Failure, Result, Success

__all__ = [
    "DomainError",
    "ErrorCode",
    "Failure",
    "Result",
    "Success",
    "ValidationError",
]

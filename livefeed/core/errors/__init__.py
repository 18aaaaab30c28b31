"""Core errors package.

Exports all core-level error classes for convenient importing.

Usage:
    from livefeed.core.errors import DomainError, ValidationError
"""

from livefeed.core.errors.common_errors import ValidationError
from livefeed.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "ValidationError",
]

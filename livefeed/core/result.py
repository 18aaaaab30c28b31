"""Result types for railway-oriented programming.

Operations that touch the log backend (append, read, acknowledge) and the
client-side frame parser report their outcome as data instead of raising.
Callers branch on the variant with ``isinstance`` or structural pattern
matching.

Usage:
    result = await publisher.append("product.updated", {"id": 1})
    match result:
        case Success(value=entry_id):
            logger.debug("Appended", entry_id=entry_id)
        case Failure(error=error):
            logger.warning("Append failed", error_code=error.code.value)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful outcome.

    Attributes:
        value: The produced value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed outcome.

    Attributes:
        error: What went wrong.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]

"""Reconnect backoff schedule.

delay(attempt) = min(base_delay_ms * 2 ** (attempt - 1), max_delay_ms)

With the defaults the delays are 1000, 2000, 4000, 8000, 16000, 30000,
30000, ... milliseconds, for at most `max_attempts` consecutive attempts.
"""

from dataclasses import dataclass, replace

from livefeed.core.constants import (
    SSE_CLIENT_BASE_DELAY_MS,
    SSE_CLIENT_MAX_ATTEMPTS,
    SSE_CLIENT_MAX_DELAY_MS,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconnectPolicy:
    """Exponential backoff with a ceiling and an attempt limit.

    Attributes:
        base_delay_ms: Delay before the first retry.
        max_delay_ms: Ceiling for any single delay.
        max_attempts: Consecutive retries before giving up.
    """

    base_delay_ms: int = SSE_CLIENT_BASE_DELAY_MS
    max_delay_ms: int = SSE_CLIENT_MAX_DELAY_MS
    max_attempts: int = SSE_CLIENT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if self.base_delay_ms <= 0 or self.max_delay_ms <= 0:
            raise ValueError("delays must be greater than zero")
        if self.max_attempts < 0:
            raise ValueError("max_attempts must not be negative")

    def delay_for(self, attempt: int) -> int:
        """Delay in milliseconds before retry number `attempt` (1-based).

        Raises:
            ValueError: If attempt is lower than 1.
        """
        if attempt < 1:
            raise ValueError("attempt is 1-based")
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)

    def exhausted(self, attempt: int) -> bool:
        """True when retry number `attempt` exceeds the limit."""
        return attempt > self.max_attempts

    def with_base_delay(self, base_delay_ms: int) -> "ReconnectPolicy":
        """Copy with a new base delay (a server `retry:` hint)."""
        return replace(self, base_delay_ms=base_delay_ms)

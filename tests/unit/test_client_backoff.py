"""Unit tests for ReconnectPolicy."""

import pytest

from livefeed.client.backoff import ReconnectPolicy


@pytest.mark.unit
class TestReconnectPolicy:
    """Tests for the exponential backoff schedule."""

    def test_default_schedule(self):
        policy = ReconnectPolicy()

        delays = [policy.delay_for(attempt) for attempt in range(1, 11)]

        assert delays == [
            1000,
            2000,
            4000,
            8000,
            16000,
            30000,
            30000,
            30000,
            30000,
            30000,
        ]

    @pytest.mark.parametrize("attempt", [1, 2, 5, 20, 200])
    def test_delay_never_exceeds_ceiling(self, attempt):
        policy = ReconnectPolicy(base_delay_ms=250, max_delay_ms=5000)

        assert 250 <= policy.delay_for(attempt) <= 5000

    def test_delays_are_non_decreasing(self):
        policy = ReconnectPolicy(base_delay_ms=300, max_delay_ms=9000)

        delays = [policy.delay_for(attempt) for attempt in range(1, 30)]

        assert delays == sorted(delays)

    def test_attempt_is_one_based(self):
        with pytest.raises(ValueError):
            ReconnectPolicy().delay_for(0)

    def test_exhausted_after_max_attempts(self):
        policy = ReconnectPolicy(max_attempts=3)

        assert not policy.exhausted(3)
        assert policy.exhausted(4)

    def test_with_base_delay_keeps_other_limits(self):
        policy = ReconnectPolicy(max_delay_ms=20000, max_attempts=4)

        updated = policy.with_base_delay(3000)

        assert updated.base_delay_ms == 3000
        assert updated.max_delay_ms == 20000
        assert updated.max_attempts == 4
        assert updated.delay_for(2) == 6000

    def test_rejects_non_positive_delays(self):
        with pytest.raises(ValueError):
            ReconnectPolicy(base_delay_ms=0)

"""Shared pytest fixtures.

Redis-backed tests run against fakeredis so the suite needs no server. Each
test gets a fresh in-process Redis with decoded responses, matching the
production client configuration.
"""

from unittest.mock import MagicMock

from fakeredis import FakeAsyncRedis, FakeServer
import pytest
import pytest_asyncio

from livefeed.core.config import Settings


@pytest_asyncio.fixture
async def redis_client():
    """Provide a fresh in-memory Redis client for each test."""
    client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)

    yield client

    await client.flushall()
    await client.aclose()


@pytest.fixture
def mock_logger():
    """Logger double; bind() returns the same mock so calls stay inspectable."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def test_settings() -> Settings:
    """Settings tuned for fast streaming tests."""
    return Settings(
        sse_stream_key="sse:stream:test",
        sse_block_ms=20,
        sse_heartbeat_interval_seconds=0.05,
        sse_write_timeout_seconds=1.0,
        sse_connection_lifetime_seconds=0.3,
        sse_retry_interval_ms=1500,
    )

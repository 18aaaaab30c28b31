"""Integration tests for RedisEventPublisher.

Architecture:
    - Runs against fakeredis (in-process Redis)
    - Verifies XADD field layout, tenant routing and retention
    - Failure paths use a mocked client raising redis exceptions
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from livefeed.core.enums import ErrorCode
from livefeed.core.result import Failure, Success
from livefeed.infrastructure.enums import InfrastructureErrorCode
from livefeed.infrastructure.streaming import RedisEventPublisher

STREAM = "sse:stream:test"


@pytest.fixture
def publisher(redis_client, mock_logger):
    return RedisEventPublisher(
        redis_client=redis_client,
        stream_key=STREAM,
        max_len=1000,
        logger=mock_logger,
    )


@pytest.mark.integration
class TestAppend:
    """Tests for append() against Redis."""

    @pytest.mark.asyncio
    async def test_append_writes_envelope_fields(self, publisher, redis_client):
        result = await publisher.append("product.updated", {"id": 1, "name": "Widget"})

        assert isinstance(result, Success)
        [(entry_id, fields)] = await redis_client.xrange(STREAM)
        assert entry_id == result.value
        assert fields["event_type"] == "product.updated"
        assert json.loads(fields["data"]) == {"id": 1, "name": "Widget"}
        assert "emitted_at" in fields

    @pytest.mark.asyncio
    async def test_entry_ids_increase(self, publisher):
        first = await publisher.append("a.b", 1)
        second = await publisher.append("a.b", 2)

        ms1, seq1 = map(int, first.value.split("-"))
        ms2, seq2 = map(int, second.value.split("-"))
        assert (ms2, seq2) > (ms1, seq1)

    @pytest.mark.asyncio
    async def test_tenant_append_goes_to_tenant_stream(self, publisher, redis_client):
        await publisher.append("order.created", {"id": 9}, tenant="acme")

        assert await redis_client.xlen("sse:stream:tenant:acme") == 1
        assert await redis_client.exists(STREAM) == 0

    @pytest.mark.asyncio
    async def test_empty_event_type_rejected(self, publisher, redis_client):
        result = await publisher.append("  ", {"id": 1})

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_EVENT_TYPE
        assert await redis_client.exists(STREAM) == 0

    @pytest.mark.asyncio
    async def test_unserializable_payload_rejected(self, publisher, redis_client):
        result = await publisher.append("a.b", {"when": object()})

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_PAYLOAD
        assert (
            result.error.infrastructure_code
            == InfrastructureErrorCode.STREAM_SERIALIZATION_FAILED
        )
        assert await redis_client.exists(STREAM) == 0

    @pytest.mark.asyncio
    async def test_retention_bounds_stream(self, redis_client, mock_logger):
        publisher = RedisEventPublisher(
            redis_client=redis_client,
            stream_key=STREAM,
            max_len=10,
            logger=mock_logger,
        )

        for i in range(300):
            await publisher.append("a.b", i)

        assert await redis_client.xlen(STREAM) < 300


@pytest.mark.integration
class TestAppendFailures:
    """Fail-open behavior when Redis misbehaves."""

    @pytest.mark.asyncio
    async def test_unreachable_redis_returns_unavailable(self, mock_logger):
        redis_client = MagicMock()
        redis_client.xadd = AsyncMock(side_effect=RedisConnectionError("refused"))
        publisher = RedisEventPublisher(redis_client, STREAM, 1000, mock_logger)

        result = await publisher.append("a.b", {"id": 1})

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EVENT_LOG_UNAVAILABLE
        assert (
            result.error.infrastructure_code
            == InfrastructureErrorCode.STREAM_CONNECTION_ERROR
        )
        assert mock_logger.warning.call_args.args[0] == "stream_append_failed"

    @pytest.mark.asyncio
    async def test_command_error_returns_operation_failed(self, mock_logger):
        redis_client = MagicMock()
        redis_client.xadd = AsyncMock(side_effect=ResponseError("WRONGTYPE"))
        publisher = RedisEventPublisher(redis_client, STREAM, 1000, mock_logger)

        result = await publisher.append("a.b", {"id": 1})

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EVENT_LOG_OPERATION_FAILED
        assert (
            result.error.infrastructure_code
            == InfrastructureErrorCode.STREAM_APPEND_FAILED
        )

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, mock_logger):
        redis_client = MagicMock()
        redis_client.xadd = AsyncMock(side_effect=RuntimeError("bug"))
        publisher = RedisEventPublisher(redis_client, STREAM, 1000, mock_logger)

        result = await publisher.append("a.b", {"id": 1})

        assert isinstance(result, Failure)
        assert result.error.infrastructure_code == InfrastructureErrorCode.UNEXPECTED_ERROR
        mock_logger.error.assert_called_once()

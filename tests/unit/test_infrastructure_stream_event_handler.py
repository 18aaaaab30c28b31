"""Unit tests for StreamEventHandler.

Tests cover:
- Type tags and payload shape for every entity lifecycle event
- Tenant routing
- Non-entity events are ignored
- Fail-open behavior (publisher failures and exceptions never propagate)

Architecture:
    - Publisher is an AsyncMock; no Redis involved
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from livefeed.core.enums import ErrorCode
from livefeed.core.errors import DomainError
from livefeed.core.result import Failure, Success
from livefeed.domain.events import (
    DomainEvent,
    EntityCreated,
    EntityDeleted,
    EntityImported,
    EntityRestored,
    EntityUpdated,
)
from livefeed.infrastructure.events.handlers import (
    ENTITY_EVENT_TYPES,
    StreamEventHandler,
)


@dataclass(frozen=True, kw_only=True)
class UnrelatedEvent(DomainEvent):
    """Domain event the handler does not care about."""

    name: str = "other"


@pytest.fixture
def mock_publisher():
    publisher = MagicMock()
    publisher.append = AsyncMock(return_value=Success(value="1-0"))
    return publisher


@pytest.fixture
def handler(mock_publisher, mock_logger):
    return StreamEventHandler(publisher=mock_publisher, logger=mock_logger)


@pytest.mark.unit
class TestStreamEventHandler:
    """Tests for handle()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("event_class", "expected_type"),
        [
            (EntityCreated, "product.created"),
            (EntityUpdated, "product.updated"),
            (EntityDeleted, "product.deleted"),
            (EntityRestored, "product.restored"),
            (EntityImported, "product.imported"),
        ],
    )
    async def test_type_tag_per_event(
        self, handler, mock_publisher, event_class, expected_type
    ):
        await handler.handle(event_class(entity="product", entity_id=1))

        mock_publisher.append.assert_awaited_once()
        assert mock_publisher.append.call_args.args[0] == expected_type

    @pytest.mark.asyncio
    async def test_updated_payload_includes_changes(self, handler, mock_publisher):
        event = EntityUpdated(
            entity="product",
            entity_id=3,
            attributes={"id": 3, "price": "9.99"},
            changes={"price": {"old": "8.99", "new": "9.99"}},
        )

        await handler.handle(event)

        payload = mock_publisher.append.call_args.args[1]
        assert payload == {
            "id": 3,
            "entity": "product",
            "attributes": {"id": 3, "price": "9.99"},
            "changes": {"price": {"old": "8.99", "new": "9.99"}},
        }

    @pytest.mark.asyncio
    async def test_imported_payload_includes_count(self, handler, mock_publisher):
        await handler.handle(EntityImported(entity="product", imported_count=250))

        payload = mock_publisher.append.call_args.args[1]
        assert payload["imported_count"] == 250
        assert payload["id"] is None

    @pytest.mark.asyncio
    async def test_tenant_is_forwarded(self, handler, mock_publisher):
        await handler.handle(EntityCreated(entity="order", entity_id=9, tenant="acme"))

        assert mock_publisher.append.call_args.kwargs == {"tenant": "acme"}

    @pytest.mark.asyncio
    async def test_unrelated_event_is_ignored(self, handler, mock_publisher):
        await handler.handle(UnrelatedEvent())

        mock_publisher.append.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publisher_failure_does_not_raise(self, handler, mock_publisher):
        mock_publisher.append.return_value = Failure(
            error=DomainError(
                code=ErrorCode.EVENT_LOG_UNAVAILABLE, message="Redis down"
            )
        )

        await handler.handle(EntityDeleted(entity="product", entity_id=1))

    @pytest.mark.asyncio
    async def test_publisher_exception_is_logged(
        self, handler, mock_publisher, mock_logger
    ):
        mock_publisher.append.side_effect = RuntimeError("boom")

        await handler.handle(EntityDeleted(entity="product", entity_id=1))

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.args[0] == "stream_event_handler_failed"


@pytest.mark.unit
class TestBuildPayload:
    """Tests for build_payload()."""

    def test_non_json_values_become_strings(self):
        event = EntityCreated(
            entity="invoice",
            entity_id="inv-1",
            attributes={
                "total": Decimal("10.50"),
                "issued_at": datetime(2024, 5, 1, tzinfo=UTC),
            },
        )

        payload = StreamEventHandler.build_payload(event)

        assert payload["attributes"] == {
            "total": "10.50",
            "issued_at": "2024-05-01 00:00:00+00:00",
        }

    def test_subscribed_event_types(self):
        assert set(ENTITY_EVENT_TYPES) == {
            EntityCreated,
            EntityUpdated,
            EntityDeleted,
            EntityRestored,
            EntityImported,
        }

"""Entity lifecycle domain events.

Published by whatever code mutates a business entity (an ORM hook, a command
handler, an import job). The stream event handler subscribes to all of them
and appends one stream envelope per event, tagged `<entity>.<action>`.

Events:
    - EntityCreated: a new row was persisted
    - EntityUpdated: one or more attributes changed
    - EntityDeleted: a row was (soft) deleted
    - EntityRestored: a soft-deleted row was brought back
    - EntityImported: a bulk import finished

Usage:
    >>> event = EntityUpdated(
    ...     entity="product",
    ...     entity_id=1,
    ...     attributes={"id": 1, "price": "9.99"},
    ...     changes={"price": {"old": "8.99", "new": "9.99"}},
    ... )
    >>> event.type_tag
    'product.updated'
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

from livefeed.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class EntityEvent(DomainEvent):
    """Common shape of every entity lifecycle event.

    Attributes:
        entity: Lower-case entity name used as the type tag prefix.
        entity_id: Primary key of the affected entity.
        attributes: Snapshot of the entity after the change.
        tenant: Tenant owning the entity, None for the shared stream.
    """

    action: ClassVar[str] = "changed"

    entity: str
    entity_id: int | str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    tenant: str | None = None

    @property
    def type_tag(self) -> str:
        """Stream event type, e.g. `product.created`."""
        return f"{self.entity}.{self.action}"


@dataclass(frozen=True, kw_only=True, slots=True)
class EntityCreated(EntityEvent):
    """Entity was persisted for the first time."""

    action: ClassVar[str] = "created"


@dataclass(frozen=True, kw_only=True, slots=True)
class EntityUpdated(EntityEvent):
    """Entity attributes changed.

    Attributes:
        changes: Mapping of field name to `{"old": ..., "new": ...}`.
    """

    action: ClassVar[str] = "updated"

    changes: dict[str, dict[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True, kw_only=True, slots=True)
class EntityDeleted(EntityEvent):
    """Entity was deleted."""

    action: ClassVar[str] = "deleted"


@dataclass(frozen=True, kw_only=True, slots=True)
class EntityRestored(EntityEvent):
    """Soft-deleted entity was restored."""

    action: ClassVar[str] = "restored"


@dataclass(frozen=True, kw_only=True, slots=True)
class EntityImported(EntityEvent):
    """Bulk import completed.

    Attributes:
        imported_count: Number of rows written by the import.
    """

    action: ClassVar[str] = "imported"

    imported_count: int = 0

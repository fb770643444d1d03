"""Owned entity: a person, company or job row subject to assignment."""

from dataclasses import dataclass
from datetime import datetime

from crm_assignments.domain.value_objects.enums import EntityType


@dataclass
class OwnedEntity:
    id: str
    entity_type: EntityType
    name: str | None
    owner_id: str | None = None
    created_at: datetime | None = None

    @property
    def label(self) -> str:
        """Name used in user-facing messages, falling back to the entity kind."""
        return self.name or self.entity_type.singular

"""Port interface for owned-entity persistence (people, companies, jobs)."""

from abc import ABC, abstractmethod
from datetime import datetime

from crm_assignments.domain.entities.owned_entity import OwnedEntity
from crm_assignments.domain.value_objects.enums import EntityType


class EntityRepository(ABC):
    @abstractmethod
    async def get_by_id(self, entity_type: EntityType, entity_id: str) -> OwnedEntity | None:
        ...

    @abstractmethod
    async def get_owners(self, entity_type: EntityType, entity_ids: list[str]) -> dict[str, str | None]:
        """Map each *existing* id to its current owner_id. Missing ids are absent."""
        ...

    @abstractmethod
    async def set_owner(
        self, entity_type: EntityType, entity_id: str, owner_id: str | None, at: datetime
    ) -> None:
        ...

    @abstractmethod
    async def set_owner_bulk(
        self, entity_type: EntityType, entity_ids: list[str], owner_id: str | None, at: datetime
    ) -> int:
        """Set owner_id on all ids with set-based writes. Returns rows updated."""
        ...

    @abstractmethod
    async def get_ids_owned_by(self, entity_type: EntityType, owner_id: str) -> list[str]:
        ...

    @abstractmethod
    async def count_assigned(self, entity_type: EntityType) -> int:
        ...

    @abstractmethod
    async def count_unassigned(self, entity_type: EntityType) -> int:
        ...

    @abstractmethod
    async def count_by_owner(self, entity_type: EntityType) -> dict[str, int]:
        ...

    @abstractmethod
    async def list_unassigned(self, entity_type: EntityType, limit: int) -> list[OwnedEntity]:
        """Unowned entities, newest first."""
        ...

    @abstractmethod
    async def list_by_owner(
        self, entity_type: EntityType, owner_id: str, limit: int, offset: int
    ) -> list[OwnedEntity]:
        """Entities owned by *owner_id*, newest first."""
        ...

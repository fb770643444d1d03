"""Port interface for the append-only assignment audit log."""

from abc import ABC, abstractmethod

from crm_assignments.domain.entities.assignment_log import AssignmentLogEntry
from crm_assignments.domain.value_objects.enums import EntityType


class AssignmentLogRepository(ABC):
    @abstractmethod
    async def append(self, entry: AssignmentLogEntry) -> AssignmentLogEntry:
        ...

    @abstractmethod
    async def append_many(self, entries: list[AssignmentLogEntry]) -> int:
        ...

    @abstractmethod
    async def list_for_entity(self, entity_type: EntityType, entity_id: str) -> list[AssignmentLogEntry]:
        """Entries for one entity, most recent first."""
        ...

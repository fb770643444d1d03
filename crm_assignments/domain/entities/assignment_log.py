"""Assignment log entry: immutable audit record of one ownership change."""

from dataclasses import dataclass
from datetime import datetime

from crm_assignments.domain.value_objects.enums import EntityType


@dataclass(frozen=True)
class AssignmentLogEntry:
    entity_type: EntityType
    entity_id: str
    old_owner_id: str | None
    new_owner_id: str | None
    assigned_by: str
    timestamp: datetime
    notes: str | None = None
    id: int | None = None

    def is_unassignment(self) -> bool:
        return self.new_owner_id is None

    def user_ids(self) -> set[str]:
        """Every user id referenced by this entry."""
        return {
            uid
            for uid in (self.old_owner_id, self.new_owner_id, self.assigned_by)
            if uid
        }

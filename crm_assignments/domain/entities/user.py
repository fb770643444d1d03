"""User entity: a team member who can own CRM records."""

from dataclasses import dataclass

from crm_assignments.domain.value_objects.enums import UserRole


@dataclass
class User:
    id: str
    email: str
    full_name: str | None
    role: UserRole
    is_active: bool = True
    avatar_url: str | None = None

    @property
    def display_name(self) -> str:
        return self.full_name or "Unknown User"

    def can_own_records(self) -> bool:
        return self.is_active

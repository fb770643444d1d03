"""Port interface for user profile lookups."""

from abc import ABC, abstractmethod

from crm_assignments.domain.entities.user import User
from crm_assignments.domain.value_objects.enums import UserRole


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    async def get_active(self, user_id: str) -> User | None:
        """Return the user only if it exists and is active."""
        ...

    @abstractmethod
    async def get_many(self, user_ids: list[str]) -> list[User]:
        ...

    @abstractmethod
    async def list_active(self, role: UserRole | None = None) -> list[User]:
        """Active users ordered by full name."""
        ...

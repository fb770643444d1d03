"""Domain enums: pure Python, no external dependencies."""

from enum import Enum


class EntityType(str, Enum):
    PEOPLE = "people"
    COMPANIES = "companies"
    JOBS = "jobs"

    @property
    def singular(self) -> str:
        return _SINGULAR[self]


_SINGULAR = {
    EntityType.PEOPLE: "person",
    EntityType.COMPANIES: "company",
    EntityType.JOBS: "job",
}


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def parse(cls, raw: str | None) -> "UserRole":
        """Map a stored or imported role label onto ADMIN / USER; unknown labels are USER."""
        value = (raw or "").strip().lower()
        if value in _ADMIN_LABELS:
            return cls.ADMIN
        return cls.USER


_ADMIN_LABELS = {"admin", "administrator", "owner"}


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_USER = "INVALID_USER"
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

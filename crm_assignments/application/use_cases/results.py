"""Result objects returned by AssignmentService.

Expected business failures (missing entity, inactive user, bad input, role
denial) are reported through ``success=False`` plus an ``ErrorCode``; they are
never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from crm_assignments.domain.entities.assignment_log import AssignmentLogEntry
from crm_assignments.domain.entities.owned_entity import OwnedEntity
from crm_assignments.domain.entities.user import User
from crm_assignments.domain.value_objects.enums import ErrorCode


@dataclass
class AssignmentResult:
    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, code: ErrorCode, error: str, message: str = "Assignment failed") -> AssignmentResult:
        return cls(success=False, message=message, error=error, code=code)


@dataclass
class BulkAssignmentResult:
    success: bool
    updated_count: int
    total_requested: int
    invalid_entities: list[str] = field(default_factory=list)
    updated_ids: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, code: ErrorCode, error: str, total_requested: int) -> BulkAssignmentResult:
        return cls(
            success=False,
            updated_count=0,
            total_requested=total_requested,
            errors=[error],
            code=code,
        )

    @property
    def error(self) -> str | None:
        return self.errors[0] if self.errors else None


@dataclass
class HistoryResult:
    success: bool
    entries: list[AssignmentLogEntry] = field(default_factory=list)
    user_names: dict[str, str] = field(default_factory=dict)
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, code: ErrorCode, error: str) -> HistoryResult:
        return cls(success=False, error=error, code=code)


@dataclass
class UserAssignmentCount:
    user_id: str
    user_name: str
    count: int


@dataclass
class AssignmentStats:
    total_assigned: int
    unassigned: int
    by_user: list[UserAssignmentCount]


@dataclass
class StatsResult:
    success: bool
    stats: AssignmentStats | None = None
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, code: ErrorCode, error: str) -> StatsResult:
        return cls(success=False, error=error, code=code)


@dataclass
class TeamMembersResult:
    success: bool
    members: list[User] = field(default_factory=list)
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, code: ErrorCode, error: str) -> TeamMembersResult:
        return cls(success=False, error=error, code=code)


@dataclass
class EntityListResult:
    success: bool
    entities: list[OwnedEntity] = field(default_factory=list)
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, code: ErrorCode, error: str) -> EntityListResult:
        return cls(success=False, error=error, code=code)

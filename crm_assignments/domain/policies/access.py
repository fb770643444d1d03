"""Role-based access rules for assignment operations."""

from __future__ import annotations

from crm_assignments.domain.entities.user import User
from crm_assignments.domain.value_objects.enums import ErrorCode, UserRole

VIEW_STATS = "assignments_stats"
REASSIGN_ORPHANS = "assignments_reassign"
FILTER_TEAM = "team_filter"

ROLE_PERMISSIONS: dict[UserRole, frozenset[str]] = {
    UserRole.ADMIN: frozenset({VIEW_STATS, REASSIGN_ORPHANS, FILTER_TEAM}),
    UserRole.USER: frozenset(),
}


def has_permission(user: User, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(user.role, frozenset())


def check_permission(actor: User | None, permission: str) -> ErrorCode | None:
    """Return the denial code for *actor*, or None when the action is allowed.

    A missing or deactivated actor is UNAUTHORIZED; an active actor whose
    role lacks the permission is FORBIDDEN.
    """
    if actor is None or not actor.is_active:
        return ErrorCode.UNAUTHORIZED
    if not has_permission(actor, permission):
        return ErrorCode.FORBIDDEN
    return None

"""AssignmentService: ownership changes, bulk assignment, history and statistics."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone

from crm_assignments.application.monitoring import measured
from crm_assignments.application.ports.assignment_log_repo import AssignmentLogRepository
from crm_assignments.application.ports.entity_repo import EntityRepository
from crm_assignments.application.ports.user_repo import UserRepository
from crm_assignments.application.use_cases.results import (
    AssignmentResult,
    AssignmentStats,
    BulkAssignmentResult,
    EntityListResult,
    HistoryResult,
    StatsResult,
    TeamMembersResult,
    UserAssignmentCount,
)
from crm_assignments.domain.entities.assignment_log import AssignmentLogEntry
from crm_assignments.domain.entities.user import User
from crm_assignments.domain.policies.access import (
    FILTER_TEAM,
    REASSIGN_ORPHANS,
    VIEW_STATS,
    check_permission,
)
from crm_assignments.domain.policies.input_validation import (
    check_assignment_input,
    check_bulk_input,
    check_page,
    is_blank,
    parse_entity_type,
    unique_in_order,
)
from crm_assignments.domain.value_objects.enums import EntityType, ErrorCode, UserRole

logger = logging.getLogger(__name__)

INACTIVE_USER_ERROR = "Target user does not exist or is not active"
ORPHAN_REASSIGNMENT_NOTE = "orphaned record reassignment"

_DENIAL_MESSAGES = {
    ErrorCode.UNAUTHORIZED: "Authentication required",
    ErrorCode.FORBIDDEN: "Admin access required",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentService:
    """Validates and applies ownership changes and answers assignment queries.

    The acting user is always passed in explicitly (``assigned_by`` or
    ``actor``); the service keeps no ambient request state.
    """

    def __init__(
        self,
        entity_repo: EntityRepository,
        user_repo: UserRepository,
        log_repo: AssignmentLogRepository,
    ):
        self._entities = entity_repo
        self._users = user_repo
        self._logs = log_repo

    @measured("get_team_members")
    async def get_team_members(
        self, role: UserRole | str | None = None, actor: User | None = None
    ) -> TeamMembersResult:
        """Active users usable as assignment targets.

        Filtering by role is an admin view; the unfiltered list is open to
        every caller.
        """
        role_filter = None
        if role is not None:
            try:
                role_filter = UserRole(role)
            except ValueError:
                return TeamMembersResult.failure(ErrorCode.INVALID_INPUT, f"Invalid role: {role!r}")
            denied = check_permission(actor, FILTER_TEAM)
            if denied:
                return TeamMembersResult.failure(denied, _DENIAL_MESSAGES[denied])

        members = await self._users.list_active(role_filter)
        return TeamMembersResult(success=True, members=[m for m in members if m.can_own_records()])

    @measured("assign_entity")
    async def assign_entity(
        self,
        entity_type: EntityType | str,
        entity_id: str,
        new_owner_id: str | None,
        assigned_by: str,
    ) -> AssignmentResult:
        """Assign one entity to an active user, or unassign it when *new_owner_id* is None.

        Checks run in order: input shape, entity existence (NOT_FOUND), then
        the target user (INVALID_USER). A successful call always appends one
        audit entry, even when the owner does not change.
        """
        problem = check_assignment_input(entity_type, entity_id, assigned_by)
        if problem:
            return AssignmentResult.failure(ErrorCode.INVALID_INPUT, problem)
        if new_owner_id is not None and is_blank(new_owner_id):
            return AssignmentResult.failure(
                ErrorCode.INVALID_INPUT, "newOwnerId must be a user id or null"
            )

        etype = parse_entity_type(entity_type)
        entity = await self._entities.get_by_id(etype, entity_id)
        if entity is None:
            return AssignmentResult.failure(ErrorCode.NOT_FOUND, f"{etype.singular} not found")

        owner = None
        if new_owner_id is not None:
            owner = await self._users.get_active(new_owner_id)
            if owner is None:
                return AssignmentResult.failure(
                    ErrorCode.INVALID_USER, INACTIVE_USER_ERROR, message="Cannot assign to user"
                )

        old_owner_id = entity.owner_id
        now = _now()
        await self._entities.set_owner(etype, entity_id, new_owner_id, now)
        await self._logs.append(
            AssignmentLogEntry(
                entity_type=etype,
                entity_id=entity_id,
                old_owner_id=old_owner_id,
                new_owner_id=new_owner_id,
                assigned_by=assigned_by,
                timestamp=now,
            )
        )
        logger.info(
            "%s %s: owner %s → %s (by %s)",
            etype.value, entity_id, old_owner_id, new_owner_id, assigned_by,
        )

        if owner is not None:
            message = f"{entity.label} assigned to {owner.display_name}"
        else:
            message = f"{entity.label} unassigned"

        return AssignmentResult(
            success=True,
            message=message,
            data={
                "entityId": entity_id,
                "newOwnerId": new_owner_id,
                "ownerName": owner.display_name if owner else None,
            },
        )

    @measured("bulk_assign_entities")
    async def bulk_assign_entities(
        self,
        entity_ids: list[str],
        entity_type: EntityType | str,
        new_owner_id: str,
        assigned_by: str,
    ) -> BulkAssignmentResult:
        """Assign many entities to one owner with partial success.

        Ids that do not exist are reported in ``invalid_entities`` and skipped;
        the rest are written with set-based updates and logged with a shared
        timestamp. Repeated ids are processed once.
        """
        total_requested = len(entity_ids or [])
        problem = check_bulk_input(entity_ids, entity_type, new_owner_id, assigned_by)
        if problem:
            return BulkAssignmentResult.failure(ErrorCode.INVALID_INPUT, problem, total_requested)

        owner = await self._users.get_active(new_owner_id)
        if owner is None:
            return BulkAssignmentResult.failure(
                ErrorCode.INVALID_USER, INACTIVE_USER_ERROR, total_requested
            )

        etype = parse_entity_type(entity_type)
        requested = unique_in_order(entity_ids)
        current_owners = await self._entities.get_owners(etype, requested)
        valid = [eid for eid in requested if eid in current_owners]
        invalid = [eid for eid in requested if eid not in current_owners]

        if valid:
            now = _now()
            written = await self._entities.set_owner_bulk(etype, valid, new_owner_id, now)
            if written != len(valid):
                logger.warning(
                    "Bulk assign %s: expected %d rows updated, got %d",
                    etype.value, len(valid), written,
                )
            await self._logs.append_many(
                [
                    AssignmentLogEntry(
                        entity_type=etype,
                        entity_id=eid,
                        old_owner_id=current_owners[eid],
                        new_owner_id=new_owner_id,
                        assigned_by=assigned_by,
                        timestamp=now,
                    )
                    for eid in valid
                ]
            )

        logger.info(
            "Bulk assign %s → %s: %d updated, %d invalid of %d requested",
            etype.value, new_owner_id, len(valid), len(invalid), total_requested,
        )
        return BulkAssignmentResult(
            success=True,
            updated_count=len(valid),
            total_requested=total_requested,
            invalid_entities=invalid,
            updated_ids=valid,
        )

    @measured("get_assignment_history")
    async def get_assignment_history(
        self, entity_type: EntityType | str, entity_id: str
    ) -> HistoryResult:
        etype = parse_entity_type(entity_type)
        if etype is None:
            return HistoryResult.failure(ErrorCode.INVALID_INPUT, f"Invalid entity type: {entity_type!r}")
        if is_blank(entity_id):
            return HistoryResult.failure(ErrorCode.INVALID_INPUT, "Entity ID is required")

        entity = await self._entities.get_by_id(etype, entity_id)
        if entity is None:
            return HistoryResult.failure(ErrorCode.NOT_FOUND, f"{etype.singular} not found")

        entries = await self._logs.list_for_entity(etype, entity_id)
        user_ids = set().union(*(e.user_ids() for e in entries))
        users = await self._users.get_many(sorted(user_ids)) if user_ids else []
        return HistoryResult(
            success=True,
            entries=entries,
            user_names={u.id: u.display_name for u in users},
        )

    @measured("get_assignment_stats")
    async def get_assignment_stats(
        self, actor: User | None, entity_type: EntityType | str | None = None
    ) -> StatsResult:
        """Current ownership snapshot. Admin only."""
        denied = check_permission(actor, VIEW_STATS)
        if denied:
            return StatsResult.failure(denied, _DENIAL_MESSAGES[denied])

        if entity_type is None:
            types = list(EntityType)
        else:
            etype = parse_entity_type(entity_type)
            if etype is None:
                return StatsResult.failure(ErrorCode.INVALID_INPUT, f"Invalid entity type: {entity_type!r}")
            types = [etype]

        total_assigned = 0
        unassigned = 0
        per_owner: Counter[str] = Counter()
        for etype in types:
            total_assigned += await self._entities.count_assigned(etype)
            unassigned += await self._entities.count_unassigned(etype)
            per_owner.update(await self._entities.count_by_owner(etype))

        members = await self._users.list_active()
        by_user = sorted(
            (
                UserAssignmentCount(user_id=m.id, user_name=m.display_name, count=per_owner.get(m.id, 0))
                for m in members
            ),
            key=lambda c: (-c.count, c.user_name),
        )
        return StatsResult(
            success=True,
            stats=AssignmentStats(total_assigned=total_assigned, unassigned=unassigned, by_user=by_user),
        )

    @measured("reassign_orphaned_records")
    async def reassign_orphaned_records(
        self, actor: User | None, deleted_user_id: str, new_owner_id: str
    ) -> AssignmentResult:
        """Move every record owned by a removed user to *new_owner_id*. Admin only."""
        failed = "Failed to reassign orphaned records"
        denied = check_permission(actor, REASSIGN_ORPHANS)
        if denied:
            return AssignmentResult.failure(denied, _DENIAL_MESSAGES[denied], message=failed)
        if is_blank(deleted_user_id) or is_blank(new_owner_id):
            return AssignmentResult.failure(
                ErrorCode.INVALID_INPUT, "deletedUserId and newOwnerId are required", message=failed
            )
        if deleted_user_id == new_owner_id:
            return AssignmentResult.failure(
                ErrorCode.INVALID_INPUT, "newOwnerId must differ from deletedUserId", message=failed
            )

        owner = await self._users.get_active(new_owner_id)
        if owner is None:
            return AssignmentResult.failure(ErrorCode.INVALID_USER, INACTIVE_USER_ERROR, message=failed)

        now = _now()
        by_type: dict[str, int] = {}
        for etype in EntityType:
            ids = await self._entities.get_ids_owned_by(etype, deleted_user_id)
            if ids:
                await self._entities.set_owner_bulk(etype, ids, new_owner_id, now)
                await self._logs.append_many(
                    [
                        AssignmentLogEntry(
                            entity_type=etype,
                            entity_id=eid,
                            old_owner_id=deleted_user_id,
                            new_owner_id=new_owner_id,
                            assigned_by=actor.id,
                            timestamp=now,
                            notes=ORPHAN_REASSIGNMENT_NOTE,
                        )
                        for eid in ids
                    ]
                )
            by_type[etype.value] = len(ids)

        total = sum(by_type.values())
        logger.info(
            "Reassigned %d orphaned records from %s to %s (by %s)",
            total, deleted_user_id, new_owner_id, actor.id,
        )
        return AssignmentResult(
            success=True,
            message=f"Successfully reassigned {total} records",
            data={"total_records": total, "by_entity_type": by_type},
        )

    @measured("get_unassigned_entities")
    async def get_unassigned_entities(
        self, entity_type: EntityType | str, limit: int = 50
    ) -> EntityListResult:
        etype = parse_entity_type(entity_type)
        if etype is None:
            return EntityListResult.failure(ErrorCode.INVALID_INPUT, f"Invalid entity type: {entity_type!r}")
        problem = check_page(limit)
        if problem:
            return EntityListResult.failure(ErrorCode.INVALID_INPUT, problem)

        entities = await self._entities.list_unassigned(etype, limit)
        return EntityListResult(success=True, entities=entities)

    @measured("get_entities_by_owner")
    async def get_entities_by_owner(
        self, entity_type: EntityType | str, owner_id: str, limit: int = 50, offset: int = 0
    ) -> EntityListResult:
        etype = parse_entity_type(entity_type)
        if etype is None:
            return EntityListResult.failure(ErrorCode.INVALID_INPUT, f"Invalid entity type: {entity_type!r}")
        if is_blank(owner_id):
            return EntityListResult.failure(ErrorCode.INVALID_INPUT, "Owner ID is required")
        problem = check_page(limit, offset)
        if problem:
            return EntityListResult.failure(ErrorCode.INVALID_INPUT, problem)

        entities = await self._entities.list_by_owner(etype, owner_id, limit, offset)
        return EntityListResult(success=True, entities=entities)

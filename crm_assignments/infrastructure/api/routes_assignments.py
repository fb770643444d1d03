"""Assignment endpoints: team members, assign, bulk assign, history, stats."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crm_assignments.adapters.persistence.database import get_session
from crm_assignments.application.use_cases.assignment_service import AssignmentService
from crm_assignments.application.use_cases.results import EntityListResult
from crm_assignments.domain.entities.assignment_log import AssignmentLogEntry
from crm_assignments.domain.entities.owned_entity import OwnedEntity
from crm_assignments.domain.entities.user import User
from crm_assignments.domain.value_objects.enums import ErrorCode
from crm_assignments.infrastructure.api.auth import get_current_user
from crm_assignments.infrastructure.api.dependencies import get_assignment_service
from crm_assignments.infrastructure.api.errors import failure_response
from crm_assignments.infrastructure.api.schemas import (
    AssignRequest,
    BulkAssignRequest,
    ReassignOrphanedRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])

ASSIGNER_MISMATCH_ERROR = "assignedBy must match the authenticated user"


@router.get("/team-members")
async def list_team_members(
    role: str | None = None,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Active users that records can be assigned to."""
    result = await service.get_team_members(role=role, actor=actor)
    if not result.success:
        return failure_response(result.code, result.error)
    return [_serialize_member(m) for m in result.members]


@router.post("/assign")
async def assign_entity(
    body: AssignRequest,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
    session: AsyncSession = Depends(get_session),
):
    """Assign one entity to a user, or unassign it with ``newOwnerId: null``."""
    assigned_by = _assigner(actor, body.assigned_by)
    if assigned_by is None:
        return failure_response(ErrorCode.FORBIDDEN, ASSIGNER_MISMATCH_ERROR, "Assignment failed")

    result = await service.assign_entity(
        body.entity_type, body.entity_id, body.new_owner_id, assigned_by
    )
    if not result.success:
        logger.info("Assign rejected for %s (%s): %s", body.entity_id, result.code.value, result.error)
        return failure_response(result.code, result.error, result.message)

    await session.commit()
    return {"success": True, "message": result.message, "data": result.data}


@router.post("/bulk-assign")
async def bulk_assign(
    body: BulkAssignRequest,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
    session: AsyncSession = Depends(get_session),
):
    """Assign many entities to one user; unknown ids are reported, not fatal."""
    assigned_by = _assigner(actor, body.assigned_by)
    if assigned_by is None:
        return failure_response(
            ErrorCode.FORBIDDEN,
            ASSIGNER_MISMATCH_ERROR,
            updated_count=0,
            total_requested=len(body.entity_ids),
            invalid_entities=[],
            errors=[ASSIGNER_MISMATCH_ERROR],
        )

    result = await service.bulk_assign_entities(
        body.entity_ids, body.entity_type, body.new_owner_id, assigned_by
    )
    if not result.success:
        return failure_response(
            result.code,
            result.error,
            updated_count=0,
            total_requested=result.total_requested,
            invalid_entities=[],
            errors=result.errors,
        )

    await session.commit()
    return {
        "success": True,
        "updated_count": result.updated_count,
        "total_requested": result.total_requested,
        "invalid_entities": result.invalid_entities,
    }


@router.get("/history/{entity_type}/{entity_id}")
async def assignment_history(
    entity_type: str,
    entity_id: str,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Ownership changes of one entity, most recent first."""
    result = await service.get_assignment_history(entity_type, entity_id)
    if not result.success:
        return failure_response(result.code, result.error)
    return [_serialize_log(e, result.user_names) for e in result.entries]


@router.get("/stats")
async def assignment_stats(
    entity_type: str | None = Query(default=None, alias="entityType"),
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Current assignment counts (admin only)."""
    result = await service.get_assignment_stats(actor, entity_type)
    if not result.success:
        return failure_response(result.code, result.error)

    stats = result.stats
    return {
        "totalAssigned": stats.total_assigned,
        "unassigned": stats.unassigned,
        "byUser": [
            {"userId": c.user_id, "userName": c.user_name, "count": c.count}
            for c in stats.by_user
        ],
    }


@router.post("/reassign-orphaned")
async def reassign_orphaned(
    body: ReassignOrphanedRequest,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
    session: AsyncSession = Depends(get_session),
):
    """Move all records of a removed user to another user (admin only)."""
    result = await service.reassign_orphaned_records(
        actor, body.deleted_user_id, body.new_owner_id
    )
    if not result.success:
        return failure_response(result.code, result.error, result.message)

    await session.commit()
    return {"success": True, "message": result.message, "data": result.data}


@router.get("/unassigned/{entity_type}")
async def unassigned_entities(
    entity_type: str,
    limit: int = 50,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    result = await service.get_unassigned_entities(entity_type, limit)
    return _entity_list_response(result)


@router.get("/owned/{entity_type}/{owner_id}")
async def entities_by_owner(
    entity_type: str,
    owner_id: str,
    limit: int = 50,
    offset: int = 0,
    actor: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    result = await service.get_entities_by_owner(entity_type, owner_id, limit, offset)
    return _entity_list_response(result)


def _assigner(actor: User, claimed: str | None) -> str | None:
    """Id recorded as ``assigned_by``: the caller, or None when the body names someone else."""
    if claimed is None or not claimed.strip():
        return actor.id
    return actor.id if claimed == actor.id else None


def _entity_list_response(result: EntityListResult):
    if not result.success:
        return failure_response(result.code, result.error)
    return [_serialize_entity(e) for e in result.entities]


def _serialize_member(u: User) -> dict:
    return {
        "id": u.id,
        "full_name": u.full_name,
        "email": u.email,
        "role": u.role.value,
        "is_active": u.is_active,
        "avatar_url": u.avatar_url,
    }


def _serialize_log(e: AssignmentLogEntry, names: dict[str, str]) -> dict:
    return {
        "id": e.id,
        "entity_type": e.entity_type.value,
        "entity_id": e.entity_id,
        "old_owner_id": e.old_owner_id,
        "new_owner_id": e.new_owner_id,
        "assigned_by": e.assigned_by,
        "timestamp": e.timestamp.isoformat(),
        "notes": e.notes,
        "old_owner_name": names.get(e.old_owner_id) if e.old_owner_id else None,
        "new_owner_name": names.get(e.new_owner_id) if e.new_owner_id else None,
        "assigned_by_name": names.get(e.assigned_by),
    }


def _serialize_entity(e: OwnedEntity) -> dict:
    return {
        "id": e.id,
        "entity_type": e.entity_type.value,
        "name": e.name,
        "owner_id": e.owner_id,
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }

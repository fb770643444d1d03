"""FastAPI dependency injection: wires SQL repositories into the service."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crm_assignments.adapters.persistence.database import get_session
from crm_assignments.adapters.persistence.repositories import (
    SqlAssignmentLogRepository,
    SqlEntityRepository,
    SqlUserRepository,
)
from crm_assignments.application.use_cases.assignment_service import AssignmentService


def get_user_repo(session: AsyncSession = Depends(get_session)) -> SqlUserRepository:
    return SqlUserRepository(session)


def get_assignment_service(
    session: AsyncSession = Depends(get_session),
) -> AssignmentService:
    return AssignmentService(
        entity_repo=SqlEntityRepository(session),
        user_repo=SqlUserRepository(session),
        log_repo=SqlAssignmentLogRepository(session),
    )

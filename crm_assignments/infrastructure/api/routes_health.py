"""Health check: API liveness plus one database round trip."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crm_assignments.adapters.persistence.database import get_session

logger = logging.getLogger(__name__)

SERVICE_NAME = "CRM Assignment Service"

router = APIRouter(tags=["health"])


async def _ping(session: AsyncSession) -> str | None:
    """Round-trip one query; returns the error text, or None when the database answers."""
    try:
        await session.scalar(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", e)
        return str(e)
    return None


@router.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    failure = await _ping(session)
    return {
        "status": "degraded" if failure else "ok",
        "database": f"error: {failure}" if failure else "connected",
        "service": SERVICE_NAME,
    }

"""SQLAlchemy repository implementations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crm_assignments.adapters.persistence.models import (
    AssignmentLogModel,
    CompanyModel,
    JobModel,
    PersonModel,
    UserProfileModel,
)
from crm_assignments.application.ports.assignment_log_repo import AssignmentLogRepository
from crm_assignments.application.ports.entity_repo import EntityRepository
from crm_assignments.application.ports.user_repo import UserRepository
from crm_assignments.domain.entities.assignment_log import AssignmentLogEntry
from crm_assignments.domain.entities.owned_entity import OwnedEntity
from crm_assignments.domain.entities.user import User
from crm_assignments.domain.value_objects.enums import EntityType, UserRole

# Max ids per IN (...) clause.
IN_CLAUSE_CHUNK = 1000

# Each entity kind: ORM model and the column shown to users as its name.
_ENTITY_TABLES = {
    EntityType.PEOPLE: (PersonModel, PersonModel.name),
    EntityType.COMPANIES: (CompanyModel, CompanyModel.name),
    EntityType.JOBS: (JobModel, JobModel.title),
}


def _chunks(ids: list[str], size: int = IN_CLAUSE_CHUNK):
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


# ─── Mappers ─────────────────────────────────────────────────────────


def _user_to_domain(m: UserProfileModel) -> User:
    return User(
        id=m.id,
        email=m.email,
        full_name=m.full_name,
        role=UserRole.parse(m.role),
        is_active=m.is_active,
        avatar_url=m.avatar_url,
    )


def _log_to_domain(m: AssignmentLogModel) -> AssignmentLogEntry:
    return AssignmentLogEntry(
        id=m.id,
        entity_type=EntityType(m.entity_type),
        entity_id=m.entity_id,
        old_owner_id=m.old_owner_id,
        new_owner_id=m.new_owner_id,
        assigned_by=m.assigned_by,
        timestamp=m.assigned_at,
        notes=m.notes,
    )


def _log_to_row(entry: AssignmentLogEntry) -> dict:
    return {
        "entity_type": entry.entity_type.value,
        "entity_id": entry.entity_id,
        "old_owner_id": entry.old_owner_id,
        "new_owner_id": entry.new_owner_id,
        "assigned_by": entry.assigned_by,
        "assigned_at": entry.timestamp,
        "notes": entry.notes,
    }


# ─── Repositories ────────────────────────────────────────────────────


class SqlEntityRepository(EntityRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    def _entity_select(self, entity_type: EntityType):
        model, name_col = _ENTITY_TABLES[entity_type]
        return model, select(
            model.id, name_col.label("name"), model.owner_id, model.created_at
        )

    @staticmethod
    def _row_to_domain(entity_type: EntityType, row) -> OwnedEntity:
        return OwnedEntity(
            id=row.id,
            entity_type=entity_type,
            name=row.name,
            owner_id=row.owner_id,
            created_at=row.created_at,
        )

    async def get_by_id(self, entity_type: EntityType, entity_id: str) -> OwnedEntity | None:
        model, stmt = self._entity_select(entity_type)
        result = await self._s.execute(stmt.where(model.id == entity_id))
        row = result.one_or_none()
        return self._row_to_domain(entity_type, row) if row else None

    async def get_owners(self, entity_type: EntityType, entity_ids: list[str]) -> dict[str, str | None]:
        model, _ = _ENTITY_TABLES[entity_type]
        owners: dict[str, str | None] = {}
        for chunk in _chunks(entity_ids):
            result = await self._s.execute(
                select(model.id, model.owner_id).where(model.id.in_(chunk))
            )
            owners.update({row.id: row.owner_id for row in result})
        return owners

    async def set_owner(
        self, entity_type: EntityType, entity_id: str, owner_id: str | None, at: datetime
    ) -> None:
        model, _ = _ENTITY_TABLES[entity_type]
        await self._s.execute(
            update(model)
            .where(model.id == entity_id)
            .values(owner_id=owner_id, updated_at=at)
        )
        await self._s.flush()

    async def set_owner_bulk(
        self, entity_type: EntityType, entity_ids: list[str], owner_id: str | None, at: datetime
    ) -> int:
        model, _ = _ENTITY_TABLES[entity_type]
        updated = 0
        for chunk in _chunks(entity_ids):
            result = await self._s.execute(
                update(model)
                .where(model.id.in_(chunk))
                .values(owner_id=owner_id, updated_at=at)
                .execution_options(synchronize_session=False)
            )
            updated += result.rowcount
        await self._s.flush()
        return updated

    async def get_ids_owned_by(self, entity_type: EntityType, owner_id: str) -> list[str]:
        model, _ = _ENTITY_TABLES[entity_type]
        result = await self._s.execute(
            select(model.id).where(model.owner_id == owner_id).order_by(model.id)
        )
        return list(result.scalars())

    async def count_assigned(self, entity_type: EntityType) -> int:
        model, _ = _ENTITY_TABLES[entity_type]
        return (
            await self._s.execute(
                select(func.count(model.id)).where(model.owner_id.is_not(None))
            )
        ).scalar() or 0

    async def count_unassigned(self, entity_type: EntityType) -> int:
        model, _ = _ENTITY_TABLES[entity_type]
        return (
            await self._s.execute(
                select(func.count(model.id)).where(model.owner_id.is_(None))
            )
        ).scalar() or 0

    async def count_by_owner(self, entity_type: EntityType) -> dict[str, int]:
        model, _ = _ENTITY_TABLES[entity_type]
        rows = (
            await self._s.execute(
                select(model.owner_id, func.count(model.id))
                .where(model.owner_id.is_not(None))
                .group_by(model.owner_id)
            )
        ).all()
        return {row[0]: row[1] for row in rows}

    async def list_unassigned(self, entity_type: EntityType, limit: int) -> list[OwnedEntity]:
        model, stmt = self._entity_select(entity_type)
        result = await self._s.execute(
            stmt.where(model.owner_id.is_(None))
            .order_by(model.created_at.desc(), model.id)
            .limit(limit)
        )
        return [self._row_to_domain(entity_type, row) for row in result]

    async def list_by_owner(
        self, entity_type: EntityType, owner_id: str, limit: int, offset: int
    ) -> list[OwnedEntity]:
        model, stmt = self._entity_select(entity_type)
        result = await self._s.execute(
            stmt.where(model.owner_id == owner_id)
            .order_by(model.created_at.desc(), model.id)
            .limit(limit)
            .offset(offset)
        )
        return [self._row_to_domain(entity_type, row) for row in result]


class SqlUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, user_id: str) -> User | None:
        m = await self._s.get(UserProfileModel, user_id)
        return _user_to_domain(m) if m else None

    async def get_active(self, user_id: str) -> User | None:
        result = await self._s.execute(
            select(UserProfileModel).where(
                UserProfileModel.id == user_id,
                UserProfileModel.is_active.is_(True),
            )
        )
        m = result.scalar_one_or_none()
        return _user_to_domain(m) if m else None

    async def get_many(self, user_ids: list[str]) -> list[User]:
        users: list[User] = []
        for chunk in _chunks(user_ids):
            result = await self._s.execute(
                select(UserProfileModel).where(UserProfileModel.id.in_(chunk))
            )
            users.extend(_user_to_domain(m) for m in result.scalars())
        return users

    async def list_active(self, role: UserRole | None = None) -> list[User]:
        stmt = select(UserProfileModel).where(UserProfileModel.is_active.is_(True))
        if role is not None:
            stmt = stmt.where(UserProfileModel.role == role.value)
        result = await self._s.execute(
            stmt.order_by(UserProfileModel.full_name, UserProfileModel.id)
        )
        return [_user_to_domain(m) for m in result.scalars()]


class SqlAssignmentLogRepository(AssignmentLogRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def append(self, entry: AssignmentLogEntry) -> AssignmentLogEntry:
        m = AssignmentLogModel(**_log_to_row(entry))
        self._s.add(m)
        await self._s.flush()
        return _log_to_domain(m)

    async def append_many(self, entries: list[AssignmentLogEntry]) -> int:
        if not entries:
            return 0
        await self._s.execute(insert(AssignmentLogModel), [_log_to_row(e) for e in entries])
        await self._s.flush()
        return len(entries)

    async def list_for_entity(self, entity_type: EntityType, entity_id: str) -> list[AssignmentLogEntry]:
        result = await self._s.execute(
            select(AssignmentLogModel)
            .where(
                AssignmentLogModel.entity_type == entity_type.value,
                AssignmentLogModel.entity_id == entity_id,
            )
            .order_by(AssignmentLogModel.assigned_at.desc(), AssignmentLogModel.id.desc())
        )
        return [_log_to_domain(m) for m in result.scalars()]

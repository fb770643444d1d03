"""Pytest configuration, in-memory port fakes and shared fixtures."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

import pytest

from crm_assignments.application.ports.assignment_log_repo import AssignmentLogRepository
from crm_assignments.application.ports.entity_repo import EntityRepository
from crm_assignments.application.ports.user_repo import UserRepository
from crm_assignments.application.use_cases.assignment_service import AssignmentService
from crm_assignments.domain.entities.assignment_log import AssignmentLogEntry
from crm_assignments.domain.entities.owned_entity import OwnedEntity
from crm_assignments.domain.entities.user import User
from crm_assignments.domain.value_objects.enums import EntityType, UserRole

# ─── In-memory fakes ────────────────────────────────────────────────


class InMemoryStore:
    """Shared state behind the fake repositories; ``calls`` records every port call."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.entities: dict[EntityType, dict[str, OwnedEntity]] = {t: {} for t in EntityType}
        self.updated_at: dict[tuple[EntityType, str], datetime] = {}
        self.logs: list[AssignmentLogEntry] = []
        self.calls: list[str] = []

    def add_user(self, uid, name, role=UserRole.USER, active=True) -> User:
        user = User(
            id=uid, email=f"{uid}@example.com", full_name=name, role=role, is_active=active,
        )
        self.users[uid] = user
        return user

    def add_entity(self, entity_type, eid, name=None, owner_id=None, created_at=None) -> OwnedEntity:
        entity = OwnedEntity(
            id=eid, entity_type=entity_type, name=name, owner_id=owner_id,
            created_at=created_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        self.entities[entity_type][eid] = entity
        return entity

    def owner_of(self, entity_type, eid):
        return self.entities[entity_type][eid].owner_id

    def logs_for(self, entity_type, eid):
        return [e for e in self.logs if e.entity_type == entity_type and e.entity_id == eid]


class FakeEntityRepo(EntityRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _table(self, entity_type):
        return self._store.entities[entity_type]

    async def get_by_id(self, entity_type, entity_id):
        self._store.calls.append("entities.get_by_id")
        return self._table(entity_type).get(entity_id)

    async def get_owners(self, entity_type, entity_ids):
        self._store.calls.append("entities.get_owners")
        table = self._table(entity_type)
        return {eid: table[eid].owner_id for eid in entity_ids if eid in table}

    async def set_owner(self, entity_type, entity_id, owner_id, at):
        self._store.calls.append("entities.set_owner")
        entity = self._table(entity_type).get(entity_id)
        if entity is not None:
            entity.owner_id = owner_id
            self._store.updated_at[(entity_type, entity_id)] = at

    async def set_owner_bulk(self, entity_type, entity_ids, owner_id, at):
        self._store.calls.append("entities.set_owner_bulk")
        table = self._table(entity_type)
        updated = 0
        for eid in entity_ids:
            if eid in table:
                table[eid].owner_id = owner_id
                self._store.updated_at[(entity_type, eid)] = at
                updated += 1
        return updated

    async def get_ids_owned_by(self, entity_type, owner_id):
        self._store.calls.append("entities.get_ids_owned_by")
        return sorted(e.id for e in self._table(entity_type).values() if e.owner_id == owner_id)

    async def count_assigned(self, entity_type):
        return sum(1 for e in self._table(entity_type).values() if e.owner_id is not None)

    async def count_unassigned(self, entity_type):
        return sum(1 for e in self._table(entity_type).values() if e.owner_id is None)

    async def count_by_owner(self, entity_type):
        return dict(Counter(e.owner_id for e in self._table(entity_type).values() if e.owner_id))

    async def list_unassigned(self, entity_type, limit):
        rows = [e for e in self._table(entity_type).values() if e.owner_id is None]
        rows.sort(key=lambda e: (-e.created_at.timestamp(), e.id))
        return rows[:limit]

    async def list_by_owner(self, entity_type, owner_id, limit, offset):
        rows = [e for e in self._table(entity_type).values() if e.owner_id == owner_id]
        rows.sort(key=lambda e: (-e.created_at.timestamp(), e.id))
        return rows[offset:offset + limit]


class FakeUserRepo(UserRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, user_id):
        self._store.calls.append("users.get_by_id")
        return self._store.users.get(user_id)

    async def get_active(self, user_id):
        self._store.calls.append("users.get_active")
        user = self._store.users.get(user_id)
        return user if user and user.is_active else None

    async def get_many(self, user_ids):
        return [self._store.users[uid] for uid in user_ids if uid in self._store.users]

    async def list_active(self, role=None):
        users = [
            u for u in self._store.users.values()
            if u.is_active and (role is None or u.role == role)
        ]
        return sorted(users, key=lambda u: (u.full_name or "", u.id))


class FakeLogRepo(AssignmentLogRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _stamp(self, entry):
        stored = AssignmentLogEntry(
            id=len(self._store.logs) + 1,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            old_owner_id=entry.old_owner_id,
            new_owner_id=entry.new_owner_id,
            assigned_by=entry.assigned_by,
            timestamp=entry.timestamp,
            notes=entry.notes,
        )
        self._store.logs.append(stored)
        return stored

    async def append(self, entry):
        self._store.calls.append("logs.append")
        return self._stamp(entry)

    async def append_many(self, entries):
        self._store.calls.append("logs.append_many")
        for entry in entries:
            self._stamp(entry)
        return len(entries)

    async def list_for_entity(self, entity_type, entity_id):
        entries = self._store.logs_for(entity_type, entity_id)
        return sorted(entries, key=lambda e: (e.timestamp, e.id), reverse=True)


# ─── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.add_user("admin-1", "Admin User", role=UserRole.ADMIN)
    s.add_user("user-1", "Test User 1")
    s.add_user("user-2", "Test User 2")
    s.add_user("inactive-1", "Former User", active=False)

    s.add_entity(EntityType.PEOPLE, "lead-1", name="Test Lead 1")
    s.add_entity(EntityType.PEOPLE, "e1", name="Test Lead 2")
    s.add_entity(EntityType.PEOPLE, "e2", name="Test Lead 3")
    s.add_entity(EntityType.COMPANIES, "comp-1", name="Acme Corp")
    s.add_entity(EntityType.JOBS, "job-1", name="Account Executive")
    return s


@pytest.fixture
def service(store) -> AssignmentService:
    return AssignmentService(
        entity_repo=FakeEntityRepo(store),
        user_repo=FakeUserRepo(store),
        log_repo=FakeLogRepo(store),
    )


@pytest.fixture
def admin(store) -> User:
    return store.users["admin-1"]


@pytest.fixture
def member(store) -> User:
    return store.users["user-1"]


@pytest.fixture
def user_repo(store) -> FakeUserRepo:
    return FakeUserRepo(store)

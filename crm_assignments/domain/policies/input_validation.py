"""Input validation for assignment requests.

Each check returns an error message, or ``None`` when the input is valid.
"""

from __future__ import annotations

from collections.abc import Iterable

from crm_assignments.domain.value_objects.enums import EntityType

MAX_PAGE_SIZE = 500


def is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def parse_entity_type(raw: EntityType | str | None) -> EntityType | None:
    """Resolve a raw entity type (``"people"``, ``EntityType.JOBS``...) or return None."""
    if isinstance(raw, EntityType):
        return raw
    try:
        return EntityType(raw)
    except ValueError:
        return None


def check_assignment_input(
    entity_type: EntityType | str | None,
    entity_id: str | None,
    assigned_by: str | None,
) -> str | None:
    if parse_entity_type(entity_type) is None:
        return f"Invalid entity type: {entity_type!r}"
    if is_blank(entity_id):
        return "Entity ID is required"
    if is_blank(assigned_by):
        return "assignedBy is required"
    return None


def check_bulk_input(
    entity_ids: list[str] | None,
    entity_type: EntityType | str | None,
    new_owner_id: str | None,
    assigned_by: str | None,
) -> str | None:
    if not entity_ids:
        return "No entities provided for assignment"
    if any(is_blank(eid) for eid in entity_ids):
        return "Entity IDs must be non-empty strings"
    if parse_entity_type(entity_type) is None:
        return f"Invalid entity type: {entity_type!r}"
    if is_blank(new_owner_id):
        return "New owner ID is required"
    if is_blank(assigned_by):
        return "assignedBy is required"
    return None


def check_page(limit: int, offset: int = 0) -> str | None:
    if limit < 1 or limit > MAX_PAGE_SIZE:
        return f"limit must be between 1 and {MAX_PAGE_SIZE}"
    if offset < 0:
        return "offset must not be negative"
    return None


def unique_in_order(ids: Iterable[str]) -> list[str]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))

"""Tests for input validation and access policies."""

from crm_assignments.domain.entities.user import User
from crm_assignments.domain.policies.access import (
    FILTER_TEAM,
    REASSIGN_ORPHANS,
    VIEW_STATS,
    check_permission,
    has_permission,
)
from crm_assignments.domain.policies.input_validation import (
    MAX_PAGE_SIZE,
    check_assignment_input,
    check_bulk_input,
    check_page,
    is_blank,
    parse_entity_type,
    unique_in_order,
)
from crm_assignments.domain.value_objects.enums import EntityType, ErrorCode, UserRole

ADMIN = User(id="a", email="a@x.io", full_name="Admin", role=UserRole.ADMIN)
MEMBER = User(id="m", email="m@x.io", full_name="Member", role=UserRole.USER)
FORMER_ADMIN = User(id="f", email="f@x.io", full_name="Former", role=UserRole.ADMIN, is_active=False)

# ─── input validation ────────────────────────────────────────────────


def test_is_blank():
    assert is_blank(None)
    assert is_blank("")
    assert is_blank("   ")
    assert is_blank(42)
    assert not is_blank("lead-1")


def test_parse_entity_type():
    assert parse_entity_type("people") is EntityType.PEOPLE
    assert parse_entity_type(EntityType.JOBS) is EntityType.JOBS
    assert parse_entity_type("People") is None
    assert parse_entity_type(None) is None


def test_assignment_input_ok():
    assert check_assignment_input("companies", "c1", "u1") is None


def test_assignment_input_bad_type():
    assert "Invalid entity type" in check_assignment_input("leads", "c1", "u1")


def test_assignment_input_missing_fields():
    assert check_assignment_input("people", "  ", "u1") == "Entity ID is required"
    assert check_assignment_input("people", "p1", None) == "assignedBy is required"


def test_bulk_input_empty_list():
    assert check_bulk_input([], "people", "u1", "u1") == "No entities provided for assignment"
    assert check_bulk_input(None, "people", "u1", "u1") == "No entities provided for assignment"


def test_bulk_input_blank_id():
    assert check_bulk_input(["p1", ""], "people", "u1", "u1") == "Entity IDs must be non-empty strings"


def test_bulk_input_requires_owner():
    assert check_bulk_input(["p1"], "people", None, "u1") == "New owner ID is required"


def test_bulk_input_ok():
    assert check_bulk_input(["p1", "p2"], EntityType.PEOPLE, "u1", "u1") is None


def test_check_page_bounds():
    assert check_page(1) is None
    assert check_page(MAX_PAGE_SIZE, 10) is None
    assert check_page(0) is not None
    assert check_page(MAX_PAGE_SIZE + 1) is not None
    assert check_page(10, -1) == "offset must not be negative"


def test_unique_in_order():
    assert unique_in_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


# ─── access ──────────────────────────────────────────────────────────


def test_admin_has_every_permission():
    for perm in (VIEW_STATS, REASSIGN_ORPHANS, FILTER_TEAM):
        assert has_permission(ADMIN, perm)
        assert check_permission(ADMIN, perm) is None


def test_member_is_forbidden():
    assert not has_permission(MEMBER, VIEW_STATS)
    assert check_permission(MEMBER, VIEW_STATS) == ErrorCode.FORBIDDEN


def test_missing_actor_is_unauthorized():
    assert check_permission(None, VIEW_STATS) == ErrorCode.UNAUTHORIZED


def test_inactive_actor_is_unauthorized():
    assert check_permission(FORMER_ADMIN, REASSIGN_ORPHANS) == ErrorCode.UNAUTHORIZED

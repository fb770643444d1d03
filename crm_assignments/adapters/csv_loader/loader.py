"""CSV loader: reads user and CRM record exports for seeding."""

from __future__ import annotations

import csv
import logging
import uuid
from pathlib import Path

from crm_assignments.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    normalize_role,
    parse_bool,
)
from crm_assignments.domain.value_objects.enums import EntityType

logger = logging.getLogger(__name__)

# Column that holds an entity's display name, by kind.
_NAME_COLUMNS = {
    EntityType.PEOPLE: ("name", "full_name", "person"),
    EntityType.COMPANIES: ("name", "company_name", "company"),
    EntityType.JOBS: ("title", "job_title", "name"),
}

# Extra columns copied through per kind, keyed by model attribute.
_EXTRA_COLUMNS = {
    EntityType.PEOPLE: {"email": ("email", "email_address"), "company_role": ("company_role", "role", "title")},
    EntityType.COMPANIES: {"industry": ("industry",)},
    EntityType.JOBS: {"company_id": ("company_id",)},
}


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Pick the delimiter (comma/semicolon/tab) that occurs most in the header line."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    counts = {d: first_line.count(d) for d in (",", ";", "\t")}
    best_delim = max(counts, key=counts.get)
    if counts[best_delim] == 0:
        return csv.excel

    class DynamicDialect(csv.excel):
        delimiter = best_delim

    return DynamicDialect


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Args:
        file_path: path to the CSV file.
        encoding: file encoding (utf-8-sig strips BOM automatically).

    Returns:
        List of dicts with normalized column names and cleaned values.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = [
            {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            for raw_row in reader
        ]

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def _first(row: dict[str, str | None], columns: tuple[str, ...]) -> str | None:
    for col in columns:
        value = row.get(col)
        if value:
            return value
    return None


def load_users(file_path: Path) -> list[dict]:
    """Load and normalize a user profiles CSV.

    Expected columns (after normalization):
        id, email, full_name (or name), role, is_active (or active), avatar_url
    Rows without an email are skipped.
    """
    users = []
    for row in _read_csv(file_path):
        email = _first(row, ("email", "email_address"))
        if not email:
            logger.warning("Skipping user row without email: %s", row)
            continue
        users.append({
            "id": row.get("id") or str(uuid.uuid4()),
            "email": email.lower(),
            "full_name": _first(row, ("full_name", "name")),
            "role": normalize_role(row.get("role")),
            "is_active": parse_bool(_first(row, ("is_active", "active"))),
            "avatar_url": row.get("avatar_url"),
        })
    logger.info("Parsed %d users", len(users))
    return users


def load_entities(file_path: Path, entity_type: EntityType) -> list[dict]:
    """Load people / companies / jobs rows.

    Every row yields ``id``, ``owner_id`` and the kind's name column
    (``name`` or ``title``), plus the kind's extra columns when present.
    """
    name_key = "title" if entity_type == EntityType.JOBS else "name"
    entities = []
    for row in _read_csv(file_path):
        record = {
            "id": row.get("id") or str(uuid.uuid4()),
            name_key: _first(row, _NAME_COLUMNS[entity_type]),
            "owner_id": _first(row, ("owner_id", "owner")),
        }
        for attr, columns in _EXTRA_COLUMNS[entity_type].items():
            record[attr] = _first(row, columns)
        entities.append(record)
    logger.info("Parsed %d %s", len(entities), entity_type.value)
    return entities

"""CSV value normalization: handles BOM, trailing spaces, Airtable/Excel export quirks."""

from __future__ import annotations

import re

from crm_assignments.domain.value_objects.enums import UserRole

_TRUE_VALUES = {"true", "yes", "y", "1", "active", "checked"}
_FALSE_VALUES = {"false", "no", "n", "0", "inactive", "unchecked"}


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Removes BOM characters (\\ufeff)
    - Strips leading/trailing whitespace
    - Replaces runs of spaces / non-breaking spaces / dashes with one underscore
    - Lowercases
    - Strips anything that is not alphanumeric or underscore
    """
    name = name.replace("\ufeff", "")
    name = name.strip()
    name = re.sub(r"[\s\u00a0\-]+", "_", name)
    name = name.lower()
    name = re.sub(r"[^\w]", "", name, flags=re.UNICODE)
    return name


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_bool(raw: str | None, default: bool = True) -> bool:
    """Parse checkbox-style values ('TRUE', 'yes', '1', 'inactive'...)."""
    value = clean_string(raw)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def normalize_role(raw: str | None) -> str:
    """Map free-form role labels onto 'admin' / 'user'."""
    return UserRole.parse(clean_string(raw)).value

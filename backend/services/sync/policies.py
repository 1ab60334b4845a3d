"""Field update policies applied when a sync observes an existing row.

Event-sourced data (:class:`MmaSyncService`) is authoritative and overwrites
what is stored. Roster-sourced data (:class:`RosterSyncService`) only fills
fields that still hold a placeholder, so a sparse roster stub can never
regress a populated fighter.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

UpdatePolicy = Callable[[Any, Mapping[str, Any]], dict[str, Any]]

PLACEHOLDER_STRINGS = frozenset({"", "Unknown", "UNKNOWN"})
RECORD_COUNT_FIELDS = frozenset({"pro_wins", "pro_losses", "pro_draws", "pro_no_contests"})


def is_placeholder(field: str, value: Any) -> bool:
    """Return ``True`` when ``value`` carries no information for ``field``."""

    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in PLACEHOLDER_STRINGS
    if field in RECORD_COUNT_FIELDS:
        return value == 0
    return False


def authoritative_overwrite(existing: Any, incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Write every observed value. ``None`` means "not observed" and is skipped."""

    return {field: value for field, value in incoming.items() if value is not None}


def fill_missing_only(existing: Any, incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Write only meaningful values into fields that still hold a placeholder."""

    changes: dict[str, Any] = {}
    for field, value in incoming.items():
        if is_placeholder(field, value):
            continue
        if is_placeholder(field, getattr(existing, field, None)):
            changes[field] = value
    return changes


__all__ = [
    "PLACEHOLDER_STRINGS",
    "RECORD_COUNT_FIELDS",
    "UpdatePolicy",
    "authoritative_overwrite",
    "fill_missing_only",
    "is_placeholder",
]

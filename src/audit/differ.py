"""
ChangeDiffer: shallow field diff between two entry snapshots

Values are compared by their ``json.dumps`` form. Dict-valued fields therefore
compare by key order as well as content; two dicts with the same pairs in a
different order count as a change. Audit consumers rely on this, keep it.
"""

import json
from typing import Any, Dict, Iterable, Mapping, Optional

from src.voice_journal.config import DEFAULT_IGNORED_FIELDS
from src.voice_journal.exceptions import UnserializableValueError

# Absent side of a key that only one snapshot has
MISSING = object()
MISSING_CANONICAL = "undefined"

Change = Dict[str, Any]

# Excluded from every diff, whatever the caller passes
ALWAYS_IGNORED = frozenset(DEFAULT_IGNORED_FIELDS)


def canonicalize(field: str, value: Any) -> str:
    """Return the comparison form of a value.

    Raises:
        UnserializableValueError: ``json.dumps`` rejected the value
    """
    if value is MISSING:
        return MISSING_CANONICAL
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise UnserializableValueError(field, value, exc) from exc


class ChangeDiffer:
    """Compute ``{field: {"before": ..., "after": ...}}`` for changed fields.

    ``ignored_fields`` adds to ``updated_at``, it never replaces it.
    """

    def __init__(self, ignored_fields: Iterable[str] = DEFAULT_IGNORED_FIELDS):
        self.ignored_fields = frozenset(ignored_fields) | ALWAYS_IGNORED

    def diff(
        self,
        before: Optional[Mapping[str, Any]],
        after: Optional[Mapping[str, Any]],
    ) -> Dict[str, Change]:
        """
        Diff two flat snapshots

        Args:
            before: Snapshot before the write (None is treated as empty)
            after: Snapshot after the write (None is treated as empty)

        Returns:
            Changed fields only, with the original values. A key present on
            one side only reports ``MISSING`` for the other side.

        Raises:
            UnserializableValueError: A value has no JSON form
        """
        before = before or {}
        after = after or {}

        changes: Dict[str, Change] = {}
        keys = list(before) + [key for key in after if key not in before]
        for key in keys:
            if key in self.ignored_fields:
                continue

            before_value = before.get(key, MISSING)
            after_value = after.get(key, MISSING)

            if canonicalize(key, before_value) != canonicalize(key, after_value):
                changes[key] = {"before": before_value, "after": after_value}

        return changes


_default_differ = ChangeDiffer()


def calculate_changes(
    before: Optional[Mapping[str, Any]], after: Optional[Mapping[str, Any]]
) -> Dict[str, Change]:
    """Diff two snapshots, ignoring ``updated_at``."""
    return _default_differ.diff(before, after)


def strip_missing(changes: Mapping[str, Change]) -> Dict[str, Dict[str, Any]]:
    """Drop ``MISSING`` sides so the change map can be stored as JSON."""
    return {
        key: {side: value for side, value in change.items() if value is not MISSING}
        for key, change in changes.items()
    }

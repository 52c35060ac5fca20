"""
Entry audit trail

Every create / update / delete of a journal entry is recorded with the
before/after snapshots and, for updates, the per-field change map.

Recording never blocks the write that triggered it: failures are logged and
swallowed by ``AuditTrail.record``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from src.voice_journal.config import resolve_db_path

from .differ import ChangeDiffer, strip_missing

logger = logging.getLogger(__name__)


class AuditOperation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(slots=True)
class AuditLogEntry:
    """One audit record for an entry write."""

    operation: AuditOperation
    entry_id: str
    user_id: str
    timestamp: str
    before_data: Optional[Dict[str, Any]] = None
    after_data: Optional[Dict[str, Any]] = None
    changes: Optional[Dict[str, Dict[str, Any]]] = None
    id: Optional[int] = field(default=None)


def build_audit_entry(
    entry_id: Any,
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
    differ: Optional[ChangeDiffer] = None,
) -> Optional[AuditLogEntry]:
    """
    Classify a write and build its audit record

    Args:
        entry_id: ID of the written entry
        before: Snapshot before the write (None when the entry was created)
        after: Snapshot after the write (None when the entry was deleted)
        differ: Differ used for updates (defaults to ignoring ``updated_at``)

    Returns:
        AuditLogEntry, or None when the write cannot be classified or carries
        no ``user_id``

    Raises:
        UnserializableValueError: An updated snapshot holds a value with no
            JSON form
    """
    if before is None and after is not None:
        operation = AuditOperation.CREATE
    elif before is not None and after is None:
        operation = AuditOperation.DELETE
    elif before is not None and after is not None:
        operation = AuditOperation.UPDATE
    else:
        logger.warning("Unknown operation type for entry %s", entry_id)
        return None

    user_id = (after or {}).get("user_id") or (before or {}).get("user_id")
    if not user_id:
        logger.error("No user_id found for entry %s", entry_id)
        return None

    changes = None
    if operation is AuditOperation.UPDATE:
        changes = strip_missing((differ or ChangeDiffer()).diff(before, after))

    return AuditLogEntry(
        operation=operation,
        entry_id=str(entry_id),
        user_id=str(user_id),
        timestamp=datetime.now(timezone.utc).isoformat(),
        before_data=None if operation is AuditOperation.CREATE else dict(before),
        after_data=None if operation is AuditOperation.DELETE else dict(after),
        changes=changes,
    )


class AuditLogRepository:
    """SQLite storage for audit records (entry_audit_logs table)."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = resolve_db_path(db_path)
        self._initialize()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS entry_audit_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    operation TEXT NOT NULL CHECK (operation IN ('create','update','delete')),
                    entry_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    before_json TEXT,
                    after_json TEXT,
                    changes_json TEXT
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_audit_entry ON entry_audit_logs(entry_id)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_audit_user ON entry_audit_logs(user_id)"
            )
            conn.commit()

    @staticmethod
    def _dump(value: Optional[Dict[str, Any]]) -> Optional[str]:
        return None if value is None else json.dumps(value, ensure_ascii=False)

    @staticmethod
    def _load(value: Optional[str]) -> Optional[Dict[str, Any]]:
        return None if value is None else json.loads(value)

    @classmethod
    def _row_to_entry(cls, row: sqlite3.Row) -> AuditLogEntry:
        return AuditLogEntry(
            id=row["id"],
            operation=AuditOperation(row["operation"]),
            entry_id=row["entry_id"],
            user_id=row["user_id"],
            timestamp=row["timestamp"],
            before_data=cls._load(row["before_json"]),
            after_data=cls._load(row["after_json"]),
            changes=cls._load(row["changes_json"]),
        )

    def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO entry_audit_logs
                    (operation, entry_id, user_id, timestamp, before_json, after_json, changes_json)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.operation.value,
                    entry.entry_id,
                    entry.user_id,
                    entry.timestamp,
                    self._dump(entry.before_data),
                    self._dump(entry.after_data),
                    self._dump(entry.changes),
                ),
            )
            conn.commit()
            entry.id = cursor.lastrowid
        return entry

    def list_for_entry(self, entry_id: Any) -> List[AuditLogEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM entry_audit_logs WHERE entry_id = ? ORDER BY id ASC",
                (str(entry_id),),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def list_for_user(self, user_id: str) -> List[AuditLogEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM entry_audit_logs WHERE user_id = ? ORDER BY id ASC",
                (user_id,),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def delete_for_user(self, user_id: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM entry_audit_logs WHERE user_id = ?", (user_id,)
            )
            conn.commit()
            return cursor.rowcount


class AuditTrail:
    """Record entry writes into an ``AuditLogRepository``."""

    def __init__(
        self,
        repository: Optional[AuditLogRepository] = None,
        differ: Optional[ChangeDiffer] = None,
    ):
        self.repository = repository or AuditLogRepository()
        self.differ = differ or ChangeDiffer()

    def record(
        self,
        entry_id: Any,
        before: Optional[Mapping[str, Any]],
        after: Optional[Mapping[str, Any]],
    ) -> Optional[AuditLogEntry]:
        """
        Build and store the audit record for one write

        Returns:
            The stored record, or None when nothing was stored
        """
        try:
            entry = build_audit_entry(entry_id, before, after, self.differ)
            if entry is None:
                return None
            stored = self.repository.append(entry)
            logger.info(
                "Audit log created for %s operation on entry %s by user %s",
                entry.operation.value,
                entry.entry_id,
                entry.user_id,
            )
            return stored
        except Exception as exc:
            # Auditing must not fail the original write
            logger.exception("Failed to create audit log for entry %s: %s", entry_id, exc)
            return None

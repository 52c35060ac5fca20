"""
User data deletion log

One record per deletion request, written whether the deletion completed or
failed. The records outlive the user's entries and audit logs.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

from src.voice_journal.config import resolve_db_path

USER_DATA_DELETION = "user_data_deletion"


class DeletionStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class DataDeletionLog:
    """Outcome of one user data deletion request."""

    user_id: str
    status: DeletionStatus
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_source: str = "user_initiated"
    deleted_entries: int = 0
    deleted_audio_files: int = 0
    deleted_audit_logs: int = 0
    error: Optional[str] = None
    operation: str = USER_DATA_DELETION
    id: Optional[int] = None


class DataDeletionLogRepository:
    """SQLite storage for deletion records (data_deletion_logs table)."""

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
                CREATE TABLE IF NOT EXISTS data_deletion_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    operation TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    status TEXT NOT NULL CHECK (status IN ('completed','failed')),
                    request_source TEXT NOT NULL,
                    deleted_entries INTEGER NOT NULL DEFAULT 0,
                    deleted_audio_files INTEGER NOT NULL DEFAULT 0,
                    deleted_audit_logs INTEGER NOT NULL DEFAULT 0,
                    error TEXT
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_deletion_user ON data_deletion_logs(user_id)"
            )
            conn.commit()

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> DataDeletionLog:
        return DataDeletionLog(
            id=row["id"],
            operation=row["operation"],
            user_id=row["user_id"],
            timestamp=row["timestamp"],
            status=DeletionStatus(row["status"]),
            request_source=row["request_source"],
            deleted_entries=row["deleted_entries"],
            deleted_audio_files=row["deleted_audio_files"],
            deleted_audit_logs=row["deleted_audit_logs"],
            error=row["error"],
        )

    def append(self, log: DataDeletionLog) -> DataDeletionLog:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO data_deletion_logs
                    (operation, user_id, timestamp, status, request_source,
                     deleted_entries, deleted_audio_files, deleted_audit_logs, error)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    log.operation,
                    log.user_id,
                    log.timestamp,
                    log.status.value,
                    log.request_source,
                    log.deleted_entries,
                    log.deleted_audio_files,
                    log.deleted_audit_logs,
                    log.error,
                ),
            )
            conn.commit()
            log.id = cursor.lastrowid
        return log

    def list_for_user(self, user_id: str) -> List[DataDeletionLog]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM data_deletion_logs WHERE user_id = ? ORDER BY id ASC",
                (user_id,),
            ).fetchall()
        return [self._row_to_log(row) for row in rows]

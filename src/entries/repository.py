from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from src.audit import AuditTrail
from src.voice_journal.config import resolve_db_path

from .models import EntryFilters, EntryPage, JournalEntry

UNSET = object()

LIST_FIELDS = ("wins", "regrets", "tasks", "keywords")

DEFAULT_PAGE_SIZE = 20
ORDER_BY = "date DESC, created_at DESC, id DESC"


class EntryRepository:
    """SQLite-backed journal entries. Writes are mirrored into the audit trail."""

    def __init__(
        self,
        db_path: Optional[Path] = None,
        audit_trail: Optional[AuditTrail] = None,
    ):
        self.db_path = resolve_db_path(db_path)
        self.audit_trail = audit_trail
        self._initialize()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    transcript TEXT NOT NULL DEFAULT '',
                    wins_json TEXT NOT NULL DEFAULT '[]',
                    regrets_json TEXT NOT NULL DEFAULT '[]',
                    tasks_json TEXT NOT NULL DEFAULT '[]',
                    keywords_json TEXT NOT NULL DEFAULT '[]',
                    sentiment_score REAL NOT NULL DEFAULT 0
                        CHECK (sentiment_score >= -1 AND sentiment_score <= 1),
                    audio_file_path TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_entries_user_date ON entries(user_id, date)"
            )
            conn.commit()

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _dump_list(values: Optional[Sequence[str]]) -> str:
        return json.dumps(list(values or []), ensure_ascii=False)

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> JournalEntry:
        return JournalEntry(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            transcript=row["transcript"],
            wins=json.loads(row["wins_json"]),
            regrets=json.loads(row["regrets_json"]),
            tasks=json.loads(row["tasks_json"]),
            keywords=json.loads(row["keywords_json"]),
            sentiment_score=row["sentiment_score"],
            audio_file_path=row["audio_file_path"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _audit(self, entry_id: int, before: Any, after: Any) -> None:
        if self.audit_trail is not None:
            self.audit_trail.record(entry_id, before, after)

    def create(
        self,
        user_id: str,
        date: str,
        transcript: str,
        *,
        wins: Optional[Sequence[str]] = None,
        regrets: Optional[Sequence[str]] = None,
        tasks: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        sentiment_score: float = 0.0,
        audio_file_path: Optional[str] = None,
    ) -> JournalEntry:
        now = self._now()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO entries (user_id, date, transcript, wins_json, regrets_json,
                    tasks_json, keywords_json, sentiment_score, audio_file_path,
                    created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    date,
                    transcript,
                    self._dump_list(wins),
                    self._dump_list(regrets),
                    self._dump_list(tasks),
                    self._dump_list(keywords),
                    sentiment_score,
                    audio_file_path,
                    now,
                    now,
                ),
            )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM entries WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        entry = self._row_to_entry(row)
        self._audit(entry.id, None, entry.to_dict())
        return entry

    def get(self, entry_id: int) -> Optional[JournalEntry]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM entries WHERE id = ?", (entry_id,)).fetchone()
        return self._row_to_entry(row) if row else None

    @staticmethod
    def _escape_like(text: str) -> str:
        return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

    def _where(self, user_id: str, filters: EntryFilters) -> Tuple[str, List[object]]:
        clauses = ["user_id = ?"]
        params: list[object] = [user_id]

        if filters.start_date:
            clauses.append("date >= ?")
            params.append(filters.start_date)
        if filters.end_date:
            clauses.append("date <= ?")
            params.append(filters.end_date)
        if filters.sentiment_min is not None:
            clauses.append("sentiment_score >= ?")
            params.append(filters.sentiment_min)
        if filters.sentiment_max is not None:
            clauses.append("sentiment_score <= ?")
            params.append(filters.sentiment_max)
        if filters.search_text:
            clauses.append("transcript LIKE ? ESCAPE '\\'")
            params.append(f"%{self._escape_like(filters.search_text)}%")
        keywords = [keyword.lower() for keyword in filters.keywords if keyword]
        if keywords:
            # keywords_json is a JSON array of lower-cased tokens
            placeholders = ", ".join("?" for _ in keywords)
            clauses.append(
                "EXISTS (SELECT 1 FROM json_each(entries.keywords_json) "
                f"WHERE json_each.value IN ({placeholders}))"
            )
            params.extend(keywords)

        return " AND ".join(clauses), params

    def list(self, user_id: str, filters: Optional[EntryFilters] = None) -> List[JournalEntry]:
        """Every matching entry, newest first."""
        where, params = self._where(user_id, filters or EntryFilters())
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM entries WHERE {where} ORDER BY {ORDER_BY}", params
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def find(
        self,
        user_id: str,
        filters: Optional[EntryFilters] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> EntryPage:
        """
        One page of matching entries, newest first

        Args:
            user_id: Owner of the entries
            filters: Listing filters (None for all entries)
            page: 1-based page number
            page_size: Entries per page

        Raises:
            ValueError: page or page_size is below 1
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be at least 1")

        where, params = self._where(user_id, filters or EntryFilters())
        with self._connect() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) FROM entries WHERE {where}", params
            ).fetchone()[0]
            rows = conn.execute(
                f"SELECT * FROM entries WHERE {where} ORDER BY {ORDER_BY} LIMIT ? OFFSET ?",
                params + [page_size, (page - 1) * page_size],
            ).fetchall()
        return EntryPage(
            entries=[self._row_to_entry(row) for row in rows],
            total_count=total,
            page=page,
            page_size=page_size,
        )

    def update(
        self,
        entry_id: int,
        *,
        date: Optional[str] = None,
        transcript: Optional[str] = None,
        wins: Optional[Sequence[str]] = None,
        regrets: Optional[Sequence[str]] = None,
        tasks: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        sentiment_score: Optional[float] = None,
        audio_file_path: Any = UNSET,
    ) -> Optional[JournalEntry]:
        before = self.get(entry_id)
        if before is None:
            return None

        fields: list[str] = []
        params: list[object] = []

        if date is not None:
            fields.append("date = ?")
            params.append(date)
        if transcript is not None:
            fields.append("transcript = ?")
            params.append(transcript)
        for name, values in zip(LIST_FIELDS, (wins, regrets, tasks, keywords)):
            if values is not None:
                fields.append(f"{name}_json = ?")
                params.append(self._dump_list(values))
        if sentiment_score is not None:
            fields.append("sentiment_score = ?")
            params.append(sentiment_score)
        if audio_file_path is not UNSET:
            fields.append("audio_file_path = ?")
            params.append(audio_file_path)

        if not fields:
            return before

        fields.append("updated_at = ?")
        params.append(self._now())
        params.append(entry_id)

        with self._connect() as conn:
            conn.execute(f"UPDATE entries SET {', '.join(fields)} WHERE id = ?", params)
            conn.commit()
            row = conn.execute("SELECT * FROM entries WHERE id = ?", (entry_id,)).fetchone()

        after = self._row_to_entry(row)
        self._audit(entry_id, before.to_dict(), after.to_dict())
        return after

    def delete(self, entry_id: int) -> bool:
        before = self.get(entry_id)
        if before is None:
            return False
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
            conn.commit()
            deleted = cursor.rowcount > 0
        if deleted:
            self._audit(entry_id, before.to_dict(), None)
        return deleted

    def delete_for_user(self, user_id: str) -> List[JournalEntry]:
        """Remove every entry of a user without auditing. Returns the removed entries."""
        with self._connect() as conn:
            # Hold the write lock so the returned entries are exactly the deleted ones
            conn.execute("BEGIN IMMEDIATE")
            rows = conn.execute(
                f"SELECT * FROM entries WHERE user_id = ? ORDER BY {ORDER_BY}", (user_id,)
            ).fetchall()
            conn.execute("DELETE FROM entries WHERE user_id = ?", (user_id,))
            conn.commit()
        return [self._row_to_entry(row) for row in rows]

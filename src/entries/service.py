"""
EntryService: journal entry workflows around the insight extractor

- create_entry: store a transcript together with its extracted insights
- analyze_entry: re-run extraction for an existing entry
- list_entries, update_entry, delete_entry: ownership-checked entry access
- delete_user_data: remove a user's entries and audit logs, recording the outcome

Related:
- src/insights/extractor.py: insight extraction
- src/entries/repository.py: entry storage
- src/audit/trail.py: audit log storage
- src/audit/deletions.py: deletion outcome records
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from src.audit import (
    AuditLogRepository,
    DataDeletionLog,
    DataDeletionLogRepository,
    DeletionStatus,
)
from src.insights import InsightExtractor, InsightRecord
from src.voice_journal.exceptions import EntryNotFoundError, InvalidTranscriptError

from .models import DeletionReport, EntryFilters, EntryPage, JournalEntry
from .repository import DEFAULT_PAGE_SIZE, UNSET, EntryRepository

logger = logging.getLogger(__name__)


class EntryService:
    """Journal entry workflows"""

    def __init__(
        self,
        repository: Optional[EntryRepository] = None,
        extractor: Optional[InsightExtractor] = None,
        audit_repository: Optional[AuditLogRepository] = None,
        deletion_log_repository: Optional[DataDeletionLogRepository] = None,
    ):
        """
        Args:
            repository: Entry storage (injectable for tests)
            extractor: Insight extractor (injectable for tests)
            audit_repository: Audit log storage, cleared by delete_user_data
            deletion_log_repository: Where delete_user_data records its outcome
        """
        self.repository = repository or EntryRepository()
        self.extractor = extractor or InsightExtractor()
        self.audit_repository = audit_repository
        self.deletion_log_repository = deletion_log_repository

    def create_entry(
        self,
        user_id: str,
        date: Optional[str],
        transcript: str,
        *,
        analyze: bool = True,
        audio_file_path: Optional[str] = None,
    ) -> JournalEntry:
        """
        Create an entry, extracting insights unless ``analyze`` is False

        Args:
            user_id: Owner of the entry
            date: Entry date (YYYY-MM-DD, None for today)
            transcript: Recorded or typed text
            analyze: Run insight extraction before storing
            audio_file_path: Storage path of the recording, if any
        """
        if date is None:
            date = datetime.now().strftime("%Y-%m-%d")

        insights = self.extractor.extract(transcript) if analyze else InsightRecord()
        entry = self.repository.create(
            user_id,
            date,
            transcript,
            wins=insights.wins,
            regrets=insights.regrets,
            tasks=insights.tasks,
            keywords=insights.keywords,
            audio_file_path=audio_file_path,
        )
        logger.info("Created entry %s for user %s", entry.id, user_id)
        return entry

    def get_entry(self, entry_id: int, user_id: str) -> JournalEntry:
        """Fetch an entry owned by ``user_id``.

        Raises:
            EntryNotFoundError: Missing, or owned by somebody else
        """
        entry = self.repository.get(entry_id)
        if entry is None or entry.user_id != user_id:
            raise EntryNotFoundError(entry_id)
        return entry

    def analyze_entry(self, entry_id: int, user_id: str) -> InsightRecord:
        """
        Re-extract insights from the stored transcript and save them

        Raises:
            EntryNotFoundError: Missing, or owned by somebody else
            InvalidTranscriptError: The stored transcript is blank
        """
        entry = self.get_entry(entry_id, user_id)
        if not entry.transcript.strip():
            raise InvalidTranscriptError(f"Entry {entry_id} has no transcript to analyze")

        insights = self.extractor.extract(entry.transcript)
        self.repository.update(
            entry_id,
            wins=insights.wins,
            regrets=insights.regrets,
            tasks=insights.tasks,
            keywords=insights.keywords,
        )
        logger.info(
            "Analyzed entry %s: %d wins, %d regrets, %d tasks, %d keywords",
            entry_id,
            len(insights.wins),
            len(insights.regrets),
            len(insights.tasks),
            len(insights.keywords),
        )
        return insights

    def list_entries(
        self,
        user_id: str,
        filters: Optional[EntryFilters] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> EntryPage:
        """One page of the user's entries, newest first."""
        return self.repository.find(user_id, filters, page, page_size)

    def update_entry(
        self,
        entry_id: int,
        user_id: str,
        *,
        date: Optional[str] = None,
        transcript: Optional[str] = None,
        wins: Optional[Sequence[str]] = None,
        regrets: Optional[Sequence[str]] = None,
        tasks: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        sentiment_score: Optional[float] = None,
        audio_file_path: Any = UNSET,
    ) -> JournalEntry:
        """
        Update fields of an entry owned by ``user_id``

        None leaves a field unchanged. ``audio_file_path=None`` clears the path.

        Raises:
            EntryNotFoundError: Missing, or owned by somebody else
        """
        self.get_entry(entry_id, user_id)
        entry = self.repository.update(
            entry_id,
            date=date,
            transcript=transcript,
            wins=wins,
            regrets=regrets,
            tasks=tasks,
            keywords=keywords,
            sentiment_score=sentiment_score,
            audio_file_path=audio_file_path,
        )
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def delete_entry(self, entry_id: int, user_id: str) -> None:
        """Delete an entry owned by ``user_id``.

        Raises:
            EntryNotFoundError: Missing, or owned by somebody else
        """
        self.get_entry(entry_id, user_id)
        if not self.repository.delete(entry_id):
            raise EntryNotFoundError(entry_id)
        logger.info("Deleted entry %s for user %s", entry_id, user_id)

    def delete_user_data(
        self, user_id: str, request_source: str = "user_initiated"
    ) -> DeletionReport:
        """
        Delete all entries and audit logs of a user

        Audio files live in external storage; their paths are reported so the
        caller can remove them. A completed or failed record is written to the
        deletion log either way.

        Raises:
            Exception: Whatever the deletion raised, after the failure record
        """
        logger.info("Starting data deletion for user %s", user_id)
        timestamp = datetime.now(timezone.utc).isoformat()

        try:
            removed = self.repository.delete_for_user(user_id)
            audio_paths = [entry.audio_file_path for entry in removed if entry.audio_file_path]

            deleted_logs = 0
            if self.audit_repository is not None:
                deleted_logs = self.audit_repository.delete_for_user(user_id)

            deletion_log_id = None
            if self.deletion_log_repository is not None:
                deletion_log = self.deletion_log_repository.append(
                    DataDeletionLog(
                        user_id=user_id,
                        status=DeletionStatus.COMPLETED,
                        timestamp=timestamp,
                        request_source=request_source,
                        deleted_entries=len(removed),
                        deleted_audio_files=len(audio_paths),
                        deleted_audit_logs=deleted_logs,
                    )
                )
                deletion_log_id = deletion_log.id
        except Exception as exc:
            logger.exception("Data deletion failed for user %s: %s", user_id, exc)
            self._log_deletion_failure(user_id, request_source, exc)
            raise

        logger.info(
            "Data deletion completed for user %s. Deleted: %d entries, %d audio files, %d audit logs",
            user_id,
            len(removed),
            len(audio_paths),
            deleted_logs,
        )
        return DeletionReport(
            user_id=user_id,
            deleted_entries=len(removed),
            deleted_audit_logs=deleted_logs,
            audio_file_paths=audio_paths,
            timestamp=timestamp,
            deletion_log_id=deletion_log_id,
        )

    def _log_deletion_failure(self, user_id: str, request_source: str, error: Exception) -> None:
        if self.deletion_log_repository is None:
            return
        try:
            self.deletion_log_repository.append(
                DataDeletionLog(
                    user_id=user_id,
                    status=DeletionStatus.FAILED,
                    request_source=request_source,
                    error=str(error) or type(error).__name__,
                )
            )
        except Exception as log_exc:
            logger.exception("Failed to log deletion failure for user %s: %s", user_id, log_exc)

"""Dependency helpers shared across FastAPI routes."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from src.audit import (
    AuditLogEntry,
    AuditLogRepository,
    AuditTrail,
    ChangeDiffer,
    DataDeletionLogRepository,
)
from src.entries import EntryRepository, EntryService, JournalEntry
from src.insights import InsightExtractor, Lexicon
from src.voice_journal import Config, setup_logger

from .schemas import AuditLogResponse, EntryResponse

config = Config.from_yaml()
setup_logger(log_level=config.log_level, log_file=config.log_file)


@lru_cache(maxsize=1)
def get_extractor() -> InsightExtractor:
    """Singleton InsightExtractor, using the configured lexicon file if any."""
    lexicon = None
    if config.insights.lexicon_file:
        lexicon = Lexicon.from_yaml(config.insights.lexicon_file)
    return InsightExtractor(lexicon)


@lru_cache(maxsize=1)
def get_differ() -> ChangeDiffer:
    """Singleton ChangeDiffer."""
    return ChangeDiffer(config.audit.ignored_fields)


@lru_cache(maxsize=1)
def get_audit_repository() -> AuditLogRepository:
    """Singleton AuditLogRepository."""
    return AuditLogRepository(config.database.path)


@lru_cache(maxsize=1)
def get_deletion_log_repository() -> DataDeletionLogRepository:
    """Singleton DataDeletionLogRepository."""
    return DataDeletionLogRepository(config.database.path)


@lru_cache(maxsize=1)
def get_entry_repository() -> EntryRepository:
    """Singleton EntryRepository wired to the audit trail."""
    audit_trail = None
    if config.audit.enabled:
        audit_trail = AuditTrail(get_audit_repository(), get_differ())
    return EntryRepository(config.database.path, audit_trail=audit_trail)


@lru_cache(maxsize=1)
def get_entry_service() -> EntryService:
    """Singleton EntryService."""
    return EntryService(
        get_entry_repository(),
        get_extractor(),
        get_audit_repository(),
        get_deletion_log_repository(),
    )


def clear_caches() -> None:
    """Drop every singleton (used when the database path changes)."""
    for getter in (
        get_extractor,
        get_differ,
        get_audit_repository,
        get_deletion_log_repository,
        get_entry_repository,
        get_entry_service,
    ):
        getter.cache_clear()


async def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Resolve the caller from the X-User-Id header set by the auth proxy."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def serialize_entry(entry: JournalEntry) -> EntryResponse:
    """Convert domain JournalEntry to API response."""
    return EntryResponse(**entry.to_dict())


def serialize_audit_log(log: AuditLogEntry) -> AuditLogResponse:
    """Convert AuditLogEntry dataclass to API response."""
    return AuditLogResponse(
        id=log.id,
        operation=log.operation.value,
        entry_id=log.entry_id,
        user_id=log.user_id,
        timestamp=log.timestamp,
        before_data=log.before_data,
        after_data=log.after_data,
        changes=log.changes,
    )

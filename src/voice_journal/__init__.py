"""Application-wide configuration, logging and error types for the voice journal."""

from .config import AuditConfig, Config, DatabaseConfig, InsightConfig, resolve_db_path
from .exceptions import (
    AuditError,
    EntryError,
    EntryNotFoundError,
    InvalidTranscriptError,
    LexiconError,
    UnserializableValueError,
    VoiceJournalError,
)
from .logger import setup_logger

__all__ = [
    "AuditConfig",
    "Config",
    "DatabaseConfig",
    "InsightConfig",
    "resolve_db_path",
    "AuditError",
    "EntryError",
    "EntryNotFoundError",
    "InvalidTranscriptError",
    "LexiconError",
    "UnserializableValueError",
    "VoiceJournalError",
    "setup_logger",
]

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class JournalEntry:
    """A persisted journal entry with its extracted insights."""

    id: int
    user_id: str
    date: str  # YYYY-MM-DD
    transcript: str
    created_at: str
    updated_at: str
    wins: List[str] = field(default_factory=list)
    regrets: List[str] = field(default_factory=list)
    tasks: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    sentiment_score: float = 0.0  # -1.0 .. 1.0
    audio_file_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Flat snapshot used for audit diffs and JSON output."""
        return asdict(self)


@dataclass(slots=True)
class EntryFilters:
    """Optional filters for listing a user's entries. None or empty means no filter."""

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    keywords: List[str] = field(default_factory=list)  # any-match
    sentiment_min: Optional[float] = None
    sentiment_max: Optional[float] = None
    search_text: Optional[str] = None


@dataclass(slots=True)
class DeletionReport:
    """Result of deleting everything a user owns."""

    user_id: str
    deleted_entries: int
    deleted_audit_logs: int
    audio_file_paths: List[str]
    timestamp: str
    deletion_log_id: Optional[int] = None


@dataclass(slots=True)
class EntryPage:
    """One page of a filtered entry listing."""

    entries: List[JournalEntry]
    total_count: int
    page: int
    page_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
        }

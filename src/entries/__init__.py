"""Journal entry storage and workflows shared by the API server and the CLI."""

from .models import DeletionReport, EntryFilters, EntryPage, JournalEntry
from .repository import DEFAULT_PAGE_SIZE, EntryRepository, UNSET
from .service import EntryService

__all__ = [
    "DeletionReport",
    "EntryFilters",
    "EntryPage",
    "DEFAULT_PAGE_SIZE",
    "JournalEntry",
    "EntryRepository",
    "EntryService",
    "UNSET",
]

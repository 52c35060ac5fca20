"""Voice journal exception hierarchy

Insight extraction itself never raises; these types cover the lexicon loader,
the audit change calculation and the entry collaborators around the core.
"""

from typing import Any


class VoiceJournalError(Exception):
    """Base exception"""

    pass


class LexiconError(VoiceJournalError):
    """Lexicon file could not be parsed"""

    pass


class AuditError(VoiceJournalError):
    """Audit trail error"""

    pass


class UnserializableValueError(AuditError):
    """A snapshot value has no canonical JSON form, so it cannot be compared."""

    def __init__(self, field: str, value: Any, cause: Exception) -> None:
        self.field = field
        self.value = value
        self.cause = cause
        super().__init__(
            f"Field '{field}' holds a value of type {type(value).__name__} "
            f"that cannot be serialized: {cause}"
        )


class EntryError(VoiceJournalError):
    """Journal entry error"""

    pass


class EntryNotFoundError(EntryError):
    """Entry does not exist or belongs to another user"""

    def __init__(self, entry_id: int) -> None:
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} not found")


class InvalidTranscriptError(EntryError):
    """Transcript is empty or blank"""

    pass

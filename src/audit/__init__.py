"""Change tracking and audit logging for journal entries."""

from .deletions import DataDeletionLog, DataDeletionLogRepository, DeletionStatus
from .differ import MISSING, ChangeDiffer, calculate_changes, strip_missing
from .trail import (
    AuditLogEntry,
    AuditLogRepository,
    AuditOperation,
    AuditTrail,
    build_audit_entry,
)

__all__ = [
    "DataDeletionLog",
    "DataDeletionLogRepository",
    "DeletionStatus",
    "MISSING",
    "ChangeDiffer",
    "calculate_changes",
    "strip_missing",
    "AuditLogEntry",
    "AuditLogRepository",
    "AuditOperation",
    "AuditTrail",
    "build_audit_entry",
]

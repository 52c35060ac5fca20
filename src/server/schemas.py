"""Pydantic schemas for the FastAPI server."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str


class InsightRequest(BaseModel):
    """Request body for stateless insight extraction."""

    transcript: Any = Field(
        default="",
        description="Transcript text; non-string values are treated as empty",
    )


class ChangesRequest(BaseModel):
    """Request body for diffing two snapshots."""

    before: Optional[Dict[str, Any]] = Field(default=None, description="Snapshot before")
    after: Optional[Dict[str, Any]] = Field(default=None, description="Snapshot after")
    ignored_fields: Optional[List[str]] = Field(
        default=None,
        description="Fields never reported (defaults to the configured audit list)",
    )


class ChangesResponse(BaseModel):
    """Changed fields. A side missing from a change object was absent in that snapshot."""

    changes: Dict[str, Dict[str, Any]]


class EntryResponse(BaseModel):
    """Serialized journal entry."""

    id: int
    user_id: str
    date: str
    transcript: str
    wins: List[str]
    regrets: List[str]
    tasks: List[str]
    keywords: List[str]
    sentiment_score: float
    audio_file_path: Optional[str] = None
    created_at: str
    updated_at: str


class EntryListResponse(BaseModel):
    """One page of the caller's entries."""

    entries: List[EntryResponse]
    total_count: int
    page: int
    page_size: int


class EntryCreateRequest(BaseModel):
    """Request body for creating an entry."""

    transcript: str = Field(..., min_length=1, max_length=50000)
    date: Optional[dt.date] = Field(default=None, description="ISO date (YYYY-MM-DD), default today")
    audio_file_path: Optional[str] = Field(default=None, max_length=1024)
    analyze: bool = Field(default=True, description="Extract insights before storing")


class EntryUpdateRequest(BaseModel):
    """Request body for updating an entry."""

    date: Optional[dt.date] = Field(default=None)
    transcript: Optional[str] = Field(default=None, min_length=1, max_length=50000)
    wins: Optional[List[str]] = Field(default=None)
    regrets: Optional[List[str]] = Field(default=None)
    tasks: Optional[List[str]] = Field(default=None)
    keywords: Optional[List[str]] = Field(default=None)
    sentiment_score: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    audio_file_path: Optional[str] = Field(default=None, max_length=1024)


class AnalysisResponse(BaseModel):
    """Response for the entry analysis endpoint."""

    success: bool
    analysis: Dict[str, List[str]]


class AuditLogResponse(BaseModel):
    """Serialized audit log record."""

    id: Optional[int] = None
    operation: str
    entry_id: str
    user_id: str
    timestamp: str
    before_data: Optional[Dict[str, Any]] = None
    after_data: Optional[Dict[str, Any]] = None
    changes: Optional[Dict[str, Dict[str, Any]]] = None


class DeletionResponse(BaseModel):
    """Response for the user data deletion endpoint."""

    success: bool
    message: str
    deleted_entries: int
    deleted_audit_logs: int
    audio_file_paths: List[str]
    timestamp: str
    deletion_log_id: Optional[int] = None

"""Journal entry endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from src.entries import DEFAULT_PAGE_SIZE, UNSET, EntryFilters
from src.voice_journal.exceptions import EntryNotFoundError, InvalidTranscriptError

from ..dependencies import (
    get_audit_repository,
    get_current_user,
    get_entry_service,
    serialize_audit_log,
    serialize_entry,
)
from ..schemas import (
    AnalysisResponse,
    AuditLogResponse,
    DeletionResponse,
    EntryCreateRequest,
    EntryListResponse,
    EntryResponse,
    EntryUpdateRequest,
)

logger = logging.getLogger(__name__)


def register_entry_routes(app: FastAPI) -> None:
    """Register entry CRUD, analysis, audit and data deletion endpoints."""

    @app.get("/api/entries", response_model=EntryListResponse)
    async def list_entries(
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        keywords: List[str] = Query(default=[]),
        search_text: Optional[str] = None,
        sentiment_min: Optional[float] = None,
        sentiment_max: Optional[float] = None,
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
        user_id: str = Depends(get_current_user),
    ) -> EntryListResponse:
        """List the caller's entries, newest first. Repeat ``keywords`` to match any of them."""
        service = get_entry_service()
        filters = EntryFilters(
            start_date=start_date,
            end_date=end_date,
            keywords=keywords,
            search_text=search_text,
            sentiment_min=sentiment_min,
            sentiment_max=sentiment_max,
        )
        try:
            result = await asyncio.to_thread(
                service.list_entries, user_id, filters, page, page_size
            )
        except Exception as exc:
            logger.exception("Failed to list entries: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to list entries") from exc
        return EntryListResponse(
            entries=[serialize_entry(entry) for entry in result.entries],
            total_count=result.total_count,
            page=result.page,
            page_size=result.page_size,
        )

    @app.post("/api/entries", response_model=EntryResponse)
    async def create_entry(
        request: EntryCreateRequest, user_id: str = Depends(get_current_user)
    ) -> EntryResponse:
        """Create an entry and extract its insights."""
        service = get_entry_service()
        try:
            entry = await asyncio.to_thread(
                service.create_entry,
                user_id,
                request.date.isoformat() if request.date else None,
                request.transcript,
                analyze=request.analyze,
                audio_file_path=request.audio_file_path,
            )
            return serialize_entry(entry)
        except Exception as exc:
            logger.exception("Failed to create entry: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to create entry") from exc

    @app.get("/api/entries/{entry_id}", response_model=EntryResponse)
    async def get_entry(entry_id: int, user_id: str = Depends(get_current_user)) -> EntryResponse:
        """Fetch one of the caller's entries."""
        service = get_entry_service()
        try:
            entry = await asyncio.to_thread(service.get_entry, entry_id, user_id)
            return serialize_entry(entry)
        except EntryNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Entry not found") from exc

    @app.patch("/api/entries/{entry_id}", response_model=EntryResponse)
    async def update_entry(
        entry_id: int,
        request: EntryUpdateRequest,
        user_id: str = Depends(get_current_user),
    ) -> EntryResponse:
        """Update an existing entry."""
        service = get_entry_service()
        payload = request.model_dump(exclude_unset=True)
        try:
            entry = await asyncio.to_thread(
                service.update_entry,
                entry_id,
                user_id,
                date=payload["date"].isoformat() if payload.get("date") else None,
                transcript=payload.get("transcript"),
                wins=payload.get("wins"),
                regrets=payload.get("regrets"),
                tasks=payload.get("tasks"),
                keywords=payload.get("keywords"),
                sentiment_score=payload.get("sentiment_score"),
                audio_file_path=payload["audio_file_path"]
                if "audio_file_path" in payload
                else UNSET,
            )
            return serialize_entry(entry)
        except EntryNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Entry not found") from exc
        except Exception as exc:
            logger.exception("Failed to update entry: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to update entry") from exc

    @app.delete("/api/entries/{entry_id}")
    async def delete_entry(
        entry_id: int, user_id: str = Depends(get_current_user)
    ) -> Dict[str, bool]:
        """Delete an entry."""
        service = get_entry_service()
        try:
            await asyncio.to_thread(service.delete_entry, entry_id, user_id)
            return {"deleted": True}
        except EntryNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Entry not found") from exc
        except Exception as exc:
            logger.exception("Failed to delete entry: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to delete entry") from exc

    @app.post("/api/entries/{entry_id}/analysis", response_model=AnalysisResponse)
    async def analyze_entry(
        entry_id: int, user_id: str = Depends(get_current_user)
    ) -> AnalysisResponse:
        """Re-run insight extraction for a stored entry."""
        service = get_entry_service()
        try:
            insights = await asyncio.to_thread(service.analyze_entry, entry_id, user_id)
            return AnalysisResponse(success=True, analysis=insights.model_dump())
        except EntryNotFoundError as exc:
            raise HTTPException(
                status_code=404, detail="Entry not found or unauthorized"
            ) from exc
        except InvalidTranscriptError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except Exception as exc:
            logger.exception("Analysis failed for entry %s: %s", entry_id, exc)
            raise HTTPException(status_code=500, detail="Failed to analyze entry") from exc

    @app.get("/api/entries/{entry_id}/audit", response_model=List[AuditLogResponse])
    async def entry_audit_log(
        entry_id: int, user_id: str = Depends(get_current_user)
    ) -> List[AuditLogResponse]:
        """Audit history of one of the caller's entries (deleted entries included)."""
        audit_repo = get_audit_repository()
        logs = await asyncio.to_thread(audit_repo.list_for_entry, entry_id)
        owned = [log for log in logs if log.user_id == user_id]
        if not owned:
            raise HTTPException(status_code=404, detail="Entry not found")
        return [serialize_audit_log(log) for log in owned]

    @app.delete("/api/users/{target_user_id}/data", response_model=DeletionResponse)
    async def delete_user_data(
        target_user_id: str, user_id: str = Depends(get_current_user)
    ) -> DeletionResponse:
        """Delete every entry and audit log owned by the caller."""
        if target_user_id != user_id:
            raise HTTPException(status_code=403, detail="Cannot delete another user's data")
        service = get_entry_service()
        try:
            report = await asyncio.to_thread(service.delete_user_data, user_id)
        except Exception as exc:
            logger.exception("Data deletion failed for user %s: %s", user_id, exc)
            raise HTTPException(status_code=500, detail="Failed to delete user data") from exc
        return DeletionResponse(
            success=True,
            message="All user data has been successfully deleted",
            deleted_entries=report.deleted_entries,
            deleted_audit_logs=report.deleted_audit_logs,
            audio_file_paths=report.audio_file_paths,
            timestamp=report.timestamp,
            deletion_log_id=report.deletion_log_id,
        )

"""Stateless insight extraction and change calculation endpoints."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from src.audit import ChangeDiffer, strip_missing
from src.insights import InsightRecord
from src.voice_journal.exceptions import UnserializableValueError

from ..dependencies import get_differ, get_extractor
from ..schemas import ChangesRequest, ChangesResponse, HealthResponse, InsightRequest

logger = logging.getLogger(__name__)


def register_insight_routes(app: FastAPI) -> None:
    """Register health, insight and change endpoints."""

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Simple health check endpoint."""
        return HealthResponse(status="ok")

    @app.post("/api/insights", response_model=InsightRecord)
    async def extract(request: InsightRequest) -> InsightRecord:
        """Extract wins, regrets, tasks and keywords from a transcript."""
        return get_extractor().extract(request.transcript)

    @app.post("/api/changes", response_model=ChangesResponse)
    async def changes(request: ChangesRequest) -> ChangesResponse:
        """Diff two flat snapshots the same way the audit trail does."""
        differ = (
            ChangeDiffer(request.ignored_fields)
            if request.ignored_fields is not None
            else get_differ()
        )
        try:
            result = differ.diff(request.before, request.after)
        except UnserializableValueError as exc:
            logger.warning("Change calculation failed: %s", exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return ChangesResponse(changes=strip_missing(result))

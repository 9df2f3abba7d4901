"""
Query Router — natural-language questions, query history, and data status.
"""

import logging
import re
from fastapi import APIRouter, Depends, HTTPException, Query
from app.database import RecordStore, get_store
from app.exceptions import ValidationError
from app.models import DataStatus, QueryHistory, QueryRequest, QueryResponse
from app.services.ai_service import AIService, get_ai_service
from app.services.query_service import QueryService
from app.utils import safe_error_detail

logger = logging.getLogger(__name__)

router = APIRouter()


def get_query_service(
    store: RecordStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service),
) -> QueryService:
    return QueryService(store=store, ai=ai)


_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _parse_limit(raw: str | None) -> int | None:
    """
    Leading integer of ``raw`` ("5abc" -> 5, "2.5" -> 2), or None to use the default
    when there is no positive leading integer. Junk never errors.
    """
    match = _LEADING_INT_RE.match(raw or "")
    if not match:
        return None
    limit = int(match.group(1))
    return limit if limit > 0 else None


@router.post("/query", response_model=QueryResponse)
async def run_query(payload: QueryRequest, service: QueryService = Depends(get_query_service)):
    """
    Answer a natural-language question: generated SQL, its rows and a plain-language answer.
    Pipeline failures still return 200 with success=false.
    """
    question = payload.question
    if not isinstance(question, str) or not question.strip():
        raise ValidationError("Question is required")

    try:
        return await service.execute_query(question)
    except Exception as e:
        raise HTTPException(status_code=500, detail=safe_error_detail(e, "Internal server error"))


@router.get("/history", response_model=list[QueryHistory])
async def get_history(
    limit: str | None = Query(default=None),
    service: QueryService = Depends(get_query_service),
):
    """Most recent questions first."""
    try:
        return service.get_query_history(_parse_limit(limit))
    except Exception as e:
        raise HTTPException(status_code=500, detail=safe_error_detail(e, "Failed to get history"))


@router.delete("/history")
async def clear_history(service: QueryService = Depends(get_query_service)):
    try:
        service.clear_history()
    except Exception as e:
        raise HTTPException(status_code=500, detail=safe_error_detail(e, "Failed to clear history"))
    return {"success": True}


@router.get("/status", response_model=DataStatus)
async def data_status(service: QueryService = Depends(get_query_service)):
    """Row counts per table."""
    try:
        return service.get_data_status()
    except Exception as e:
        raise HTTPException(status_code=500, detail=safe_error_detail(e, "Failed to get data status"))

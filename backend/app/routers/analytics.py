"""
Analytics Router — dashboard charts and the AI-generated summary.
"""

from fastapi import APIRouter, Depends, HTTPException
from app.database import RecordStore, get_store
from app.models import AnalyticsData, SummaryData
from app.services.ai_service import AIService, get_ai_service
from app.services.analytics_service import AnalyticsService
from app.utils import safe_error_detail

router = APIRouter()


def get_analytics_service(
    store: RecordStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service),
) -> AnalyticsService:
    return AnalyticsService(store=store, ai=ai)


@router.get("/analytics", response_model=AnalyticsData)
async def get_analytics(service: AnalyticsService = Depends(get_analytics_service)):
    try:
        return service.generate_analytics()
    except Exception as e:
        raise HTTPException(status_code=500, detail=safe_error_detail(e, "Failed to generate analytics"))


@router.get("/summary", response_model=SummaryData)
async def get_summary(service: AnalyticsService = Depends(get_analytics_service)):
    try:
        return await service.generate_summary()
    except Exception as e:
        raise HTTPException(status_code=500, detail=safe_error_detail(e, "Failed to generate summary"))

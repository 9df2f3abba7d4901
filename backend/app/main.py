"""
SalesQL — FastAPI Backend
Ask questions about e-commerce ad and sales data in plain English.
All data is held in process memory, loaded from CSV (or built-in samples) at startup.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import get_settings
from app.database import store
from app.exceptions import ValidationError
from app.routers import analytics, query
from app.services.data_loader import DataLoader

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting SalesQL...")
    try:
        DataLoader(store).load_all_data()
    except Exception as e:
        logger.error(f"Startup failed (data load): {e}", exc_info=True)
        # Still yield so the API can serve /api/health and report empty tables
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="SalesQL",
    description="Natural-language analytics over e-commerce ad and sales data",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc) or "Invalid request"})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors too; answer 400 rather than FastAPI's 422."""
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# ── Register Routers ──────────────────────────────────────────────────
app.include_router(query.router, prefix="/api", tags=["Query"])
app.include_router(analytics.router, prefix="/api", tags=["Analytics"])


@app.get("/api/health")
async def health_check():
    counts = store.get_data_counts()
    loaded = counts.ad_sales + counts.total_sales + counts.eligibility > 0
    return {
        "status": "healthy" if loaded else "degraded",
        "service": "SalesQL",
        "records": counts.model_dump(by_alias=True),
    }

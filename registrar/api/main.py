"""
FastAPI application for the Registrar academic record engine.

Provides endpoints for:
- Grade conversion and GPA
- Academic history and section statistics
- Enrollment eligibility
- Program progress and graduation validation
- Section grade submission
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from registrar.config import settings
from registrar.api.records import router as records_router, get_record_service
from registrar.services.record_service import AcademicRecordService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name} API v{settings.app_version}")
    yield


# Create FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="""
API for a university student information system's academic records.

Features:
- Percentage to letter grade conversion with grade and quality points
- Cumulative and per-period GPA
- Prerequisite and enrollment eligibility checks
- Category credit progress and academic standing
- Graduation validation
- All-or-nothing section grade submission
    """,
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(records_router)


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    """API root - health check and basic info."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "status": "healthy",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check(service: AcademicRecordService = Depends(get_record_service)):
    """Detailed health check."""
    try:
        with service.session_factory() as session:
            session.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected",
        }
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Service unhealthy: {str(e)}")

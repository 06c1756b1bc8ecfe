"""
MediTrack Backend
Main FastAPI application for medication schedules, dose tracking and
caregiver alerts
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Configuration and database
from config import settings, dose_config
from database import init_db, get_db_context, DatabaseHealthCheck
from exceptions import MediTrackError, meditrack_exception_handler

from api import include_routers
from knowledge_base import seed_health_content
from tools.refresh_scheduler import refresh_scheduler
from tools.missed_dose_monitor import missed_dose_monitor

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

MONITOR_KEY = "missed-dose-monitor"


# ==================== LIFESPAN ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENV}")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    if settings.SEED_HEALTH_CONTENT:
        with get_db_context() as db:
            seed_health_content(db)

    if settings.MISSED_DOSE_MONITOR_ENABLED:
        refresh_scheduler.start(
            MONITOR_KEY,
            missed_dose_monitor.run,
            settings.MISSED_DOSE_SCAN_INTERVAL_SECONDS
        )

    yield

    # Shutdown
    await refresh_scheduler.shutdown()
    logger.info(f"Shutting down {settings.APP_NAME}")


# ==================== APP INITIALIZATION ====================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## MediTrack API

    Medication schedules, dose confirmation and caregiver oversight.

    ### Features
    - **Upcoming doses**: Today's doses, logged as pending shortly before they are due
    - **Dose tracking**: Mark doses taken or skipped; overdue doses become missed
    - **Caregivers**: Connected caregivers see medications, compliance and missed-dose alerts
    - **Education**: Health articles with read and bookmark tracking

    Requests identify the caller with the `X-User-Id` header.
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Attach modular API routers (prefix /api/v1)
include_routers(app)


# ==================== EXCEPTION HANDLERS ====================

app.add_exception_handler(MediTrackError, meditrack_exception_handler)


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.detail,
            "status_code": exc.status_code,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "message": "An unexpected error occurred" if not settings.DEBUG else str(exc),
            "status_code": 500,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


# ==================== HEALTH ENDPOINTS ====================

@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic health check"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check endpoint"""
    db_connected = DatabaseHealthCheck.is_connected()

    return {
        "status": "healthy" if db_connected else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "database": {
                "status": "up" if db_connected else "down",
                "type": "sqlite" if "sqlite" in settings.DATABASE_URL else "postgresql",
                "tables": DatabaseHealthCheck.get_table_counts() if db_connected else {}
            },
            "missed_dose_monitor": {
                "running": refresh_scheduler.is_running(MONITOR_KEY),
                **refresh_scheduler.stats(MONITOR_KEY)
            },
            "refresh_tasks": len(refresh_scheduler.keys())
        },
        "config": {
            "materialize_window_minutes": dose_config.MATERIALIZE_WINDOW_MINUTES,
            "missed_threshold_minutes": settings.MISSED_DOSE_THRESHOLD_MINUTES
        },
        "version": settings.APP_VERSION,
        "environment": settings.ENV
    }


# ==================== MAIN ====================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

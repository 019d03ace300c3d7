"""Streamer Legitimacy Score Service - FastAPI Application."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from streamscore.config import get_settings
from streamscore.database import async_session_maker, init_db
from streamscore.exceptions import (
    CsvFormatError,
    MigrationError,
    RecordNotFoundError,
    RecordValidationError,
)
from streamscore.api import score_router, records_router, settings_router
from streamscore.api.settings import seed_default_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Streamer Legitimacy Score Service")
    await init_db()
    async with async_session_maker() as session:
        await seed_default_settings(session)

    yield

    # Shutdown
    logger.info("Shutting down Streamer Legitimacy Score Service")


# Create application
app = FastAPI(
    title="Streamer Legitimacy Score Service",
    description="Scores streamer performance over a period and flags likely botted viewership",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check (no auth required)
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat(), "service": "streamscore"}


# Root info
@app.get("/")
async def root():
    """API information."""
    return {
        "service": "Streamer Legitimacy Score Service",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


# Include routers
app.include_router(score_router, prefix="/api/v1")
app.include_router(records_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")


# Error handlers
@app.exception_handler(RecordNotFoundError)
async def record_not_found_handler(request: Request, exc: RecordNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(RecordValidationError)
async def record_validation_handler(request: Request, exc: RecordValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.errors})


@app.exception_handler(CsvFormatError)
@app.exception_handler(MigrationError)
async def bad_upload_handler(request: Request, exc: Exception):
    logger.warning(f"Rejected upload: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "streamscore.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

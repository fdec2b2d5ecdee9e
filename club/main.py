"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from club.api.v1.router import api_router
from club.backend import create_backend, create_image_storage
from club.core.config import settings
from club.scheduler import get_scheduler_status, init_scheduler, shutdown_scheduler
from club.services.club_store import ClubStore
from club.services.reminders import ReminderService

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "store", None) is None:
        backend = create_backend(settings)
        store = ClubStore.from_settings(settings, backend, create_image_storage(settings))
        store.refresh()
        app.state.store = store
        logger.info("Club store ready (%s backend)", backend.name)

    if settings.SCHEDULER_ENABLED:
        reminders = ReminderService(app.state.store, lead_minutes=settings.REMINDER_LEAD_MINUTES)
        init_scheduler(reminders, interval_seconds=settings.REMINDER_INTERVAL_SECONDS, timezone=settings.CLUB_TIMEZONE)
    yield
    shutdown_scheduler()


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION,
              description="Class scheduling and booking for a sports club.", docs_url="/docs", redoc_url="/redoc",
              openapi_url="/openapi.json", lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=["*"],
                   allow_headers=["*"], )

app.include_router(api_router, prefix="/api/v1")

if settings.MEDIA_ROOT:
    app.mount(settings.MEDIA_BASE_URL, StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"message": "Club Scheduler API", "version": settings.VERSION, "status": "healthy"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    store = getattr(app.state, "store", None)
    return {
        "status": "healthy",
        "service": "club-scheduler-api",
        "version": settings.VERSION,
        "backend": store.backend.name if store else None,
        "scheduler": get_scheduler_status()["status"],
    }


@app.get("/info")
async def info():
    return {"project name": settings.PROJECT_NAME, "version": settings.VERSION, "project url": settings.PROJECT_URL}

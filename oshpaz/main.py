"""
Oshpaz AI - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import (
    auth_router,
    gamification_router,
    meals_router,
    reminders_router,
    report_card_router,
    social_router,
    subscription_router,
    telegram_router,
    users_router,
)
from .config import settings
from .core.logging_config import setup_logging
from .core.profile import InvalidGoalError
from .dependencies import build_services
from .middleware import RequestLoggingMiddleware
from .storage import StorageError

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    services = getattr(app.state, "services", None)
    if services is None:
        services = build_services(settings)
        app.state.services = services

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage path: {settings.local_storage_path}")
    logger.info(f"Reference timezone: {settings.reference_timezone}")
    logger.info(f"Log level: {settings.log_level.upper()}")

    if services.reminders is not None and services.settings.reminders_enabled:
        services.reminders.start()
    else:
        logger.info("Reminder scheduler disabled")

    yield

    # Shutdown
    if services.reminders is not None:
        await services.reminders.stop()
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Telegram calorie tracker backend with AI food analysis and gamification",
    lifespan=lifespan
)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


@app.exception_handler(InvalidGoalError)
async def invalid_goal_handler(request: Request, exc: InvalidGoalError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(meals_router)
app.include_router(gamification_router)
app.include_router(report_card_router)
app.include_router(reminders_router)
app.include_router(social_router)
app.include_router(subscription_router)
app.include_router(telegram_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "oshpaz.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )

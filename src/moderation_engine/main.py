# src/moderation_engine/main.py
"""Main entry point for the moderation engine API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from moderation_engine.api.v1 import (
    analytics_router,
    moderation_router,
    reports_router,
    security_router,
    users_router,
)
from moderation_engine.core.errors import (
    ContentDeletionError,
    InvalidInputError,
    NotFoundError,
    StoreUnavailableError,
)
from moderation_engine.core.settings import settings
from moderation_engine.services.refresh_worker import AnalyticsRefreshWorker

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Content moderation, report triage and abuse analytics API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(reports_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(security_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error("Store unavailable while handling %s: %s", request.url.path, exc)
    content: dict[str, object] = {"detail": str(exc)}
    if isinstance(exc, ContentDeletionError):
        content["reverted"] = exc.reverted
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=content)


@app.on_event("startup")
async def on_startup() -> None:
    if settings.analytics_refresh_enabled:
        worker = AnalyticsRefreshWorker()
        await worker.start()
        app.state.refresh_worker = worker
    else:
        app.state.refresh_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: AnalyticsRefreshWorker | None = getattr(app.state, "refresh_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Content moderation, report triage and abuse analytics API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("moderation_engine.main:app", host="0.0.0.0", port=8000, reload=settings.debug)

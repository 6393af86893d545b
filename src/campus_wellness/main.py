# src/campus_wellness/main.py
"""Main entry point for the campus wellness API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from campus_wellness.api.v1 import (
    access_router,
    complaints_router,
    departments_router,
    mind_wall_router,
    moderators_router,
    posts_router,
    votes_router,
)
from campus_wellness.core.errors import (
    ActivityFullError,
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ResolutionError,
    ValidationError,
)
from campus_wellness.core.settings import settings
from campus_wellness.services.activities import ActivityCleanupWorker
from campus_wellness.services.notifier import get_notifier

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 1

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Community posts, votes and complaint routing for campus wellbeing",
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
app.include_router(access_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(complaints_router, prefix="/api/v1")
app.include_router(departments_router, prefix="/api/v1")
app.include_router(moderators_router, prefix="/api/v1")
app.include_router(mind_wall_router, prefix="/api/v1")


@app.exception_handler(ResolutionError)
async def resolution_error_handler(request: Request, exc: ResolutionError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "errors": exc.errors},
    )


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(
    request: Request, exc: InvalidTransitionError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "current": exc.current, "requested": exc.requested},
    )


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(ActivityFullError)
async def activity_full_handler(request: Request, exc: ActivityFullError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(
    request: Request, exc: AuthorizationError
) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.on_event("startup")
async def on_startup() -> None:
    if settings.activity_cleanup_enabled:
        worker = ActivityCleanupWorker()
        await worker.start()
        app.state.cleanup_worker = worker
    else:
        app.state.cleanup_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: ActivityCleanupWorker | None = getattr(app.state, "cleanup_worker", None)
    if worker:
        await worker.stop()
    await get_notifier().close()


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
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("campus_wellness.main:app", host="0.0.0.0", port=8000, reload=settings.debug)

"""Main entry point for the TechCircle application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from techcircle.api.v1 import (
    buddies_router,
    events_router,
    moderation_router,
    profiles_router,
    projects_router,
    roles_router,
)
from techcircle.core.settings import settings
from techcircle.services.exceptions import CircleError
from techcircle.services.session_context import log_context_change, session_hub

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Member approval, tech buddies and project collaboration for TechCircle",
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


@app.exception_handler(CircleError)
async def circle_error_handler(request: Request, exc: CircleError) -> JSONResponse:
    """Render domain errors as a short message plus a machine-readable reason."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.reason)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "reason": exc.reason, "retryable": exc.retryable},
    )


# Include API routers
app.include_router(profiles_router, prefix="/api/v1")
app.include_router(buddies_router, prefix="/api/v1")
app.include_router(projects_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(roles_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    app.state.unsubscribe_session_log = session_hub.subscribe(log_context_change)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    unsubscribe = getattr(app.state, "unsubscribe_session_log", None)
    if unsubscribe:
        unsubscribe()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("techcircle.main:app", host="0.0.0.0", port=8000, reload=settings.debug)

# src/barter_moderation/main.py
"""Main entry point for the marketplace moderation service."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from barter_moderation.api.v1 import (
    content_filter_router,
    escalation_router,
    keywords_router,
    moderation_router,
    reports_router,
)
from barter_moderation.core.errors import ModerationError
from barter_moderation.core.settings import settings
from barter_moderation.schemas.common import ErrorResponse
from barter_moderation.services.escalation import EscalationWorker
from barter_moderation.services.notifier import get_notifier

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = "Keyword filtering, reports, SLA escalation and moderator actions"

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description=DESCRIPTION,
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


@app.exception_handler(ModerationError)
async def moderation_error_handler(request: Request, exc: ModerationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    fields = sorted({str(err["loc"][-1]) for err in errors if err.get("loc")})
    message = "Missing or invalid fields: " + ", ".join(fields) if fields else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 500)
}

# Include API routers
for router in (
    content_filter_router,
    reports_router,
    escalation_router,
    moderation_router,
    keywords_router,
):
    app.include_router(router, prefix="/api/v1", responses=ERROR_RESPONSES)


@app.on_event("startup")
async def on_startup() -> None:
    if settings.escalation_worker_enabled:
        worker = EscalationWorker(get_notifier())
        await worker.start()
        app.state.escalation_worker = worker
        logger.info("Escalation worker started (every %ss)", worker.interval)
    else:
        app.state.escalation_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: EscalationWorker | None = getattr(app.state, "escalation_worker", None)
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
        "description": DESCRIPTION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("barter_moderation.main:app", host="0.0.0.0", port=8000, reload=settings.debug)

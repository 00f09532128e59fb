from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .dependencies import build_services
from .errors import (
    DuplicateEntityError,
    InvalidArgumentError,
    NotFoundError,
    TrackerError,
    ValidationError,
)
from .logging_setup import setup_logging
from .routers import categories as categories_router
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "tasks", "description": "Task lifecycle, filtering and category assignment."},
    {"name": "categories", "description": "Categories with unique names and optional colors."},
]

# Failure kind -> HTTP status. Checked in order, so subclasses come first.
_STATUS_BY_ERROR = (
    (InvalidArgumentError, 400),
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateEntityError, 409),
)


def _error_response(exc: TrackerError) -> JSONResponse:
    status_code = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 500)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": str(exc),
            "detail": list(exc.errors) if isinstance(exc, ValidationError) else [],
        },
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a FastAPI application with its own, empty in-memory stores.

    Args:
        settings: configuration to use; read from the environment when omitted.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Task Tracker",
        description="Task and category tracker backed by in-memory storage.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.services = build_services(settings)

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
        """
        Translate core failures into JSON.

        Response format:
            {
                "error": "<failure class name>",
                "message": "<human readable message>",
                "detail": [... individual validation errors, if any ...]
            }
        """
        logger.debug("%s %s failed: %s", request.method, request.url.path, exc)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return a consistent JSON structure for malformed request payloads."""
        return JSONResponse(
            status_code=422,
            content={
                "error": "RequestValidationError",
                "message": "Request validation failed",
                "detail": [str(e.get("msg", e)) for e in exc.errors()],
            },
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and current entity counts.
        """
        services = app.state.services
        return {
            "message": "Healthy",
            "tasks": services.tasks.get_total_count(),
            "categories": services.categories.get_total_count(),
        }

    app.include_router(tasks_router.router)
    app.include_router(categories_router.router)

    logger.info("Task Tracker app created (category delete policy: %s)", settings.category_delete_policy)
    return app

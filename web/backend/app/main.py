"""FastAPI application for the freedom wall.

Provides REST API endpoints for:
- Posts, comments, likes, comment reactions and reports
- Polls and votes
- Banned-word management
- Admin sessions and the moderation audit trail
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

# Ensure the freedomwall package is importable by adding the project root to sys.path.
_project_root = str(Path(__file__).resolve().parents[3])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from freedomwall import __version__
from freedomwall.config import Settings
from freedomwall.errors import FreedomWallError, RateLimitError
from web.backend.app.dependencies import configure
from web.backend.app.routers import admin, banned_words, polls, posts

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def _app_error(request: Request, exc: FreedomWallError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    return JSONResponse(status_code=400, content={"message": message, "error": "INVALID_REQUEST"})


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Something went wrong"})


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and its process-wide services."""
    services = configure(settings)
    settings = services.settings

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = FastAPI(
        title="Freedom Wall API",
        description=(
            "Anonymous message wall with comments, likes, comment reactions, "
            "polls, reporting and admin moderation."
        ),
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )

    app.add_exception_handler(FreedomWallError, _app_error)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unexpected)

    app.include_router(posts.router)
    app.include_router(polls.router)
    app.include_router(banned_words.router)
    app.include_router(admin.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "Freedom Wall API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    @app.get("/api/v1/health", tags=["meta"], include_in_schema=False)
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "environment": settings.environment}

    logger.info("Freedom wall API ready (data dir %s)", settings.data_dir)
    return app


app = create_app()

"""Blog API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BlogApiError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager, lazily on
      first use when the lifespan does not run (serverless entry points)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Interactive docs served at /api-docs, where existing API clients expect them
    - Access log middleware: one structured line per request with status and duration
    - Security headers on every response; gzip for bodies over 1 KB
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from blog_api import __version__
from blog_api.api.error_handlers import register_error_handlers
from blog_api.api.routes import auth, health, posts
from blog_api.api.security_headers import (
    apply_security_headers, build_security_headers,
)
from blog_api.config import get_settings
from blog_api.infrastructure import database
from blog_api.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("blog_api.access")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if database.db_manager is None:
        database.init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    logger.info(f"Blog API started ({settings.environment})")
    yield
    if database.db_manager is not None:
        await database.db_manager.dispose()
    logger.info("Blog API shutting down")


app = FastAPI(
    title="Blog API",
    version=__version__,
    description="Blog post CRUD with authentication, image uploads and pagination",
    lifespan=lifespan,
    docs_url="/api-docs",
    redoc_url=None,
)

# CORS origins come from settings
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)

SECURITY_HEADERS = build_security_headers(settings.asset_public_base_url)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    apply_security_headers(request.url.path, response.headers, SECURITY_HEADERS)
    return response


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    access_logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return response


# Routes
app.include_router(health.router)
app.include_router(posts.router)
app.include_router(auth.router)

register_error_handlers(app)

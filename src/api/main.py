"""
Application entry point for the notes auth API.

Builds the FastAPI app: lifespan-managed connection pool, CORS for the
notes frontend, envelope error handlers, request logging, the auth router
and the meta endpoints. Run with ``uvicorn src.api.main:app``.
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.api.auth import router as auth_router
from src.api.errors import register_exception_handlers
from src.api.models import ApiResponse
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Registration, email verification and bearer-token sessions",
    },
    {
        "name": "meta",
        "description": "Health and endpoint discovery",
    },
]

ENDPOINTS = {
    "auth": {
        "register": "POST /api/auth/register",
        "verifyOtp": "POST /api/auth/verify-otp",
        "login": "POST /api/auth/login",
        "logout": "POST /api/auth/logout",
        "me": "GET /api/auth/me",
        "resendOtp": "POST /api/auth/resend-otp",
    },
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup and shutdown hooks.

    Logging is configured before anything else logs. The accounts schema
    is migrated before the first request, and the pool lives in
    ``app.state`` until shutdown.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logger.info(
        "Starting %s %s (%s, email backend: %s)",
        settings.app_name,
        settings.version,
        settings.environment,
        settings.email_backend,
    )

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    run_migrations(pool)
    app.state.pool = pool
    logger.info("Ready: accepting requests")

    yield

    pool.close()
    logger.info("Connection pool closed")


app = FastAPI(
    title=settings.app_name,
    description="HD Notes authentication API - registration with emailed "
    "verification codes and bearer-token sessions",
    version=settings.version,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log method, path and client address of every request."""
    client = request.client.host if request.client else "-"
    logger.info("%s %s - IP: %s", request.method, request.url.path, client)
    return await call_next(request)


app.include_router(auth_router, prefix="/api/auth")


@app.get(
    "/api/health",
    tags=["meta"],
    response_model=ApiResponse[dict],
    response_model_exclude_none=True,
)
async def health_check(request: Request) -> ApiResponse[dict]:
    """Report server status after a database round trip; a dead database surfaces as 500."""
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return ApiResponse(
        success=True,
        message="HD Notes Server is Up and Running!",
        data={
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.version,
            "environment": settings.environment,
        },
    )


@app.get(
    "/api",
    tags=["meta"],
    response_model=ApiResponse[dict],
    response_model_exclude_none=True,
)
async def api_index() -> ApiResponse[dict]:
    """List the available endpoints."""
    return ApiResponse(
        success=True,
        message=f"HD Notes API v{settings.version}",
        data={
            "endpoints": ENDPOINTS,
            "authentication": "Bearer Token required for protected routes",
            "documentation": "Visit /api/health for server status",
        },
    )

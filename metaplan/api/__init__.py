"""
REST API layer for Metaplan.

Provides:
- FastAPI application with CORS middleware
- Global exception handlers mapping domain errors to status codes
- API v1 router (session, daily view, tasks, goals, values, sync)
- Root-level health check

The application owns one PlannerRuntime. On startup it resumes the
remembered session, if any; on shutdown it flushes the pending write.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from metaplan.api.routes import router
from metaplan.config.settings import Settings
from metaplan.lib.exceptions import StateError, ValidationError
from metaplan.services.runtime import PlannerRuntime

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    runtime: PlannerRuntime | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Resolved settings; read from the environment when None.
        runtime: Pre-built runtime (tests); built from settings when None.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or Settings.from_env()
    runtime = runtime or PlannerRuntime.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        session = await runtime.resume()
        if session is not None:
            logger.info("Resumed session for %s", session.user_id)
        yield
        await runtime.shutdown()

    app = FastAPI(
        title="Metaplan",
        description="Prioritized daily tasks, horizon goals and core values",
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    # -------------------------------------------------------------------------
    # Exception handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(StateError)
    async def state_error_handler(request: Request, exc: StateError) -> JSONResponse:
        return JSONResponse(
            status_code=409, content={"error": "no_session", "message": str(exc)}
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422, content={"error": "validation_error", "message": str(exc)}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
            },
        )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------
    if settings.is_production and "*" in settings.cors_origins:
        raise ValueError(
            "METAPLAN_CORS_ORIGINS contains wildcard '*' which is forbidden in production."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.include_router(router)

    @app.get("/health")
    async def root_health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["create_app", "router"]

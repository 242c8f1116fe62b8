from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from campus_reservations.api.responses import register_exception_handlers
from campus_reservations.api.v1.router import router as api_v1_router
from campus_reservations.config.logging import get_logger, setup_logging
from campus_reservations.config.settings import settings
from campus_reservations.core.middleware import register_middlewares
from campus_reservations.db.init_db import init_db
from campus_reservations.tasks.sweeper import run_sweep

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()

    if not settings.is_production():
        # For dev/demo only; production schemas are managed by migrations
        init_db()

    if settings.SWEEP_ON_STARTUP:
        try:
            summary = await run_in_threadpool(run_sweep)
            logger.info("Startup expiry sweep completed", extra=summary)
        except Exception as e:
            logger.error(f"Startup expiry sweep failed: {e}", exc_info=True)

    yield

    logger.info(f"{settings.APP_NAME} shutting down")


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if settings.CORS_ORIGINS and settings.CORS_ORIGINS != ["*"]:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # Permissive for development; tighten in production
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "app": settings.APP_NAME, "version": settings.API_VERSION}

    return app


app = create_app()

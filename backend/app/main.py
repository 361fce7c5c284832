from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from backend.db import create_engine, create_session_factory, init_db

from .api import mood_router, users_router
from .api.deps import get_app_settings, get_storage_service
from .core.config import Settings, get_settings
from .core.errors import register_exception_handlers
from .core.logging import configure_logging
from .middleware import RequestLoggingMiddleware
from .services.storage import StorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database, apply migrations and wire the storage service."""

    settings: Settings = app.state.settings
    configure_logging(settings)

    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    await init_db(engine, session_factory, settings.version, settings.database_url)

    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    app.state.storage_service = StorageService(
        session_factory,
        password_rounds=settings.bcrypt_rounds,
    )

    logger.info("Starting Orbit %s", settings.version)
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Orbit stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Orbit", version=settings.version, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(users_router)
    app.include_router(mood_router)

    @app.get("/healthz")
    async def healthz(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
        return {"status": "ok", "version": settings.version}

    @app.get("/readyz")
    async def readyz(storage: StorageService = Depends(get_storage_service)) -> dict[str, Any]:
        db_ok = True
        db_detail = "ok"
        try:
            await storage.healthcheck()
        except Exception as exc:
            logger.warning("Database readiness check failed: %s", exc)
            db_ok = False
            db_detail = str(exc)
        return {"ready": db_ok, "db": {"ok": db_ok, "detail": db_detail}}

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


__all__ = ["app", "create_app"]

"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workshop_hub.api.error_handlers import register_exception_handlers
from workshop_hub.api.routers import get_api_router
from workshop_hub.core.config import AppSettings, get_settings
from workshop_hub.core.database import create_schema, session_scope
from workshop_hub.core.logging import configure_logging
from workshop_hub.services.seed import seed_demo_workshops
from workshop_hub.workers.lifecycle_worker import LifecycleWorker

LOGGER = logging.getLogger("workshop_hub.main")


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Create tables, seed the demo catalogue, and run the lifecycle worker."""

    settings: AppSettings = app.state.settings
    create_schema()
    if settings.seed_demo_data:
        with session_scope() as session:
            seed_demo_workshops(session)

    worker_task = None
    worker = None
    if settings.lifecycle_enabled:
        worker = LifecycleWorker(interval_seconds=settings.lifecycle_interval_seconds)
        worker_task = asyncio.create_task(worker.run())

    LOGGER.info("workshop_hub_started", extra={"lifecycle_enabled": settings.lifecycle_enabled})
    yield

    if worker is not None and worker_task is not None:
        worker.shutdown()
        try:
            await asyncio.wait_for(worker_task, timeout=settings.lifecycle_interval_seconds)
        except asyncio.TimeoutError:
            worker_task.cancel()
    LOGGER.info("workshop_hub_stopped")


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Workshop Hub",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app

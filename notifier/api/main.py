"""FastAPI application.

Assembles the health, message and metrics routers.  ``notifier.main``
re-exports the app object.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from notifier.api.routes.health import router as health_router
from notifier.api.routes.messages import router as messages_router
from notifier.api.routes.metrics import router as metrics_router
from notifier.core.logging import setup_logging
from notifier.core.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(messages_router)
app.include_router(metrics_router)

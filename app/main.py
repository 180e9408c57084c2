from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.memory_store import build_default_store
from logging_config import configure_logging
from services.consistency import build_default_consistency
from services.dashboard import build_default_dashboard
from services.directional import build_default_directional
from services.stations import build_default_stations

_SERVICE_FACTORIES = (
    build_default_consistency,
    build_default_dashboard,
    build_default_directional,
    build_default_stations,
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_store()
    try:
        yield
    finally:
        for factory in _SERVICE_FACTORIES:
            factory.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Air Quality Consistency",
        description="Validation-aware statistics for air-quality monitoring stations.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()

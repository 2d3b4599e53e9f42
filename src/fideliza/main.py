"""FastAPI application entrypoint for Fideliza.

Run with ``uvicorn --factory fideliza.main:create_app``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.v1.router import api_router
from .core.config import Settings, get_settings
from .core.database import Database
from .core.logging import configure_logging
from .jobs import build_scheduler

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.database_echo)
    scheduler = build_scheduler(database, hour=settings.reconciliation_hour) if settings.reconciliation_enabled else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
            logger.info("balance reconciliation scheduler started")
        try:
            yield
        finally:
            if scheduler is not None and scheduler.running:
                scheduler.shutdown(wait=False)
                logger.info("balance reconciliation scheduler stopped")
            database.dispose()
            logger.info("database connections closed")

    app = FastAPI(title="Fideliza API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.scheduler = scheduler
    app.include_router(api_router, prefix="/api/v1")
    return app

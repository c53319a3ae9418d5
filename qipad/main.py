"""Qipad API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map QipadError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qipad.api.error_handlers import register_error_handlers
from qipad.api.routes import (
    admin, auth, bidding, communities, companies, connections, credits, events,
    health, notifications, objects, projects,
)
from qipad.config import get_settings
from qipad.infrastructure import database
from qipad.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Qipad API started")
    yield
    logger.info("Qipad API shutting down")
    if database.db_manager is not None:
        await database.db_manager.dispose()


app = FastAPI(title="Qipad API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(credits.router)
app.include_router(communities.router)
app.include_router(connections.router)
app.include_router(notifications.router)
app.include_router(objects.router)
app.include_router(projects.router)
app.include_router(bidding.router)
app.include_router(companies.router)
app.include_router(events.router)

register_error_handlers(app)

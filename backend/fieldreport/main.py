"""FieldReport Storage API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FieldReportError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py; this module only wires
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldreport.api.dependencies import reset_backend
from fieldreport.api.error_handlers import register_error_handlers
from fieldreport.api.routes import backup, health, projects
from fieldreport.config import get_settings
from fieldreport.infrastructure import database
from fieldreport.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(settings.database_url)
    logger.info("FieldReport storage API started")
    yield
    logger.info("FieldReport storage API shutting down")
    reset_backend()
    if database.db_manager:
        database.db_manager.dispose()


app = FastAPI(
    title="FieldReport Storage API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(projects.router)
app.include_router(backup.router)

register_error_handlers(app)

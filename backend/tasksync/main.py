"""TaskSync API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TaskSyncError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - One ConnectionRegistry per app, on app.state; gateways resolve it from there
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Registry created with the app rather than in lifespan, so ASGI test
      transports that skip lifespan still get a working broadcast path
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasksync.api.error_handlers import register_error_handlers
from tasksync.api.routes import auth, health, task_stream, tasks
from tasksync.config import get_settings
from tasksync.infrastructure.connection_registry import ConnectionRegistry
from tasksync.infrastructure.database import close_db, init_db
from tasksync.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("TaskSync API started")
    yield
    logger.info(
        "TaskSync API shutting down",
        extra={"recipients": app.state.connection_registry.connection_count()},
    )
    await close_db()


app = FastAPI(title="TaskSync API", version="1.0.0", lifespan=lifespan)
app.state.connection_registry = ConnectionRegistry()

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
app.include_router(tasks.router)
app.include_router(task_stream.router)

register_error_handlers(app)

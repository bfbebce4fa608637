"""habitflow ASGI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from habitflow.auth.router import router as auth_router
from habitflow.config import get_settings
from habitflow.database import close_db, get_engine, init_db
from habitflow.habits.router import router as habits_router
from habitflow.health.router import router as health_router
from habitflow.middleware import setup_middleware
from habitflow.social.router import router as social_router
from habitflow.users.router import router as users_router

logger = structlog.get_logger()

OPENAPI_TAGS = [
    {"name": "Authentication", "description": "Accounts and bearer tokens."},
    {"name": "Users", "description": "Public profiles."},
    {"name": "Habits", "description": "Habits, per-period completions, streaks and completion rates."},
    {"name": "Social", "description": "Following other users and their activity feed."},
    {"name": "Health", "description": "Probes."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database engine for the lifetime of the process."""
    settings = get_settings()
    await init_db(settings.database_url, echo=settings.database_echo)
    logger.info("app_started", version=settings.app_version, database=get_engine().dialect.name)

    yield

    await close_db()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Build the app; routers are mounted under /api/v1 except the probes."""
    settings = get_settings()

    app = FastAPI(
        title="Habitflow API",
        description="Habit tracking with streaks, completion rates and a social activity feed",
        version=settings.app_version,
        openapi_tags=OPENAPI_TAGS,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    for router in (health_router, auth_router, users_router, habits_router, social_router):
        app.include_router(router)

    return app


app = create_app()

"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

os.environ.setdefault("HABITFLOW_JWT_SECRET_KEY", "test-secret-key-with-enough-bytes-for-hs256")
os.environ.setdefault("HABITFLOW_LOG_FORMAT", "console")
os.environ.setdefault("HABITFLOW_PASSWORD_HASH_TIME_COST", "1")
os.environ.setdefault("HABITFLOW_PASSWORD_HASH_MEMORY_KIB", "8192")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from habitflow.auth.jwt import create_access_token
from habitflow.auth.service import register_user
from habitflow.config import get_settings
from habitflow.database import close_db, create_all, get_session, init_db
from habitflow.db.models import User
from habitflow.main import create_app

get_settings.cache_clear()

TEST_PASSWORD = "SecurePass1"


@asynccontextmanager
async def open_session() -> AsyncGenerator[AsyncSession, None]:
    """A standalone session outside of any request, closed on exit."""
    sessions = get_session()
    session = await anext(sessions)
    try:
        yield session
    finally:
        await sessions.aclose()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[str, None]:
    """Fresh SQLite database file per test, schema created from the models."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'habitflow.db'}"
    await init_db(url)
    await create_all()
    yield url
    await close_db()


@pytest_asyncio.fixture
async def client(database: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client. The engine is initialised by `database`, not the lifespan."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(database: str) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for service-level tests and assertions."""
    async with open_session() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(database: str) -> Callable[..., Awaitable[User]]:
    """Factory creating committed users through the auth service."""

    async def _make_user(username: str, full_name: str | None = None) -> User:
        async with open_session() as db:
            user = await register_user(
                db,
                username=username,
                email=f"{username}@example.com",
                password=TEST_PASSWORD,
                full_name=full_name,
            )
            await db.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("alice", "Alice Walker")


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user("bob", "Bob Stone")


@pytest_asyncio.fixture
async def carol(make_user) -> User:
    return await make_user("carol", "Carol Reyes")

import os
from typing import AsyncGenerator, Callable

# Tests run against a throwaway in-memory SQLite database; these must be set
# before any app module reads settings.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.gateway_service.app.main import app
from tests.factories import make_user

# Import all models so metadata includes every table
from services.roster_service import models as _roster_models  # noqa: F401
from services.training_service import models as _training_models  # noqa: F401
from services.workouts_service import models as _workout_models  # noqa: F401

get_settings.cache_clear()

DEFAULT_USER_ID = "coach-1"


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory database per test. StaticPool keeps the single
    connection alive so every session sees the same data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session configured like the application's."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def act_as() -> Callable[..., AuthUser]:
    """
    Switch the authenticated user seen by the app.

    Usage:
        act_as("player-1")
        act_as("root", admin=True)
    """

    def _act(user_id: str = DEFAULT_USER_ID, *, admin: bool = False) -> AuthUser:
        user = make_user(user_id, admin=admin)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _act


@pytest_asyncio.fixture
async def client(db_session, act_as) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app and overridden DB dependency.
    Requests run as ``coach-1`` unless a test calls ``act_as``.
    """
    app.dependency_overrides[get_async_db] = lambda: db_session
    act_as(DEFAULT_USER_ID)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anonymous_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient with the real bearer-token auth dependency in place."""
    app.dependency_overrides[get_async_db] = lambda: db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JSON_LOGS", "false")

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.services import users as user_service
from api.services.notifications import NotificationPublisher, get_notification_publisher
from database.engine import Base, build_engine, get_db
from database.models import applications, interview_candidates, jobs, users  # noqa: F401
from database.models.users import UserRole

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ==================== Database ==================== #

@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ==================== Users ==================== #

async def _make_user(session, role: UserRole, email: str):
    return await user_service.create_user(
        session,
        name=f"Test {role.value.title()}",
        email=email,
        password="password123",
        role=role,
    )


@pytest.fixture
async def staff_user(db_session):
    return await _make_user(db_session, UserRole.USER, "staff@example.com")


@pytest.fixture
async def manager_user(db_session):
    return await _make_user(db_session, UserRole.MANAGER, "manager@example.com")


@pytest.fixture
async def admin_user(db_session):
    return await _make_user(db_session, UserRole.ADMIN, "admin@example.com")


# ==================== HTTP ==================== #

@pytest.fixture
def publisher():
    """Records published notifications instead of queueing emails."""
    return MagicMock(spec=NotificationPublisher)


@pytest.fixture
async def client(session_factory, publisher):
    """Async HTTP client against the app, wired to the test database."""
    from api.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_publisher] = lambda: publisher
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


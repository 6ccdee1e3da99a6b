"""
Shared test fixtures for the Attendify test suite.

Each test gets its own in-memory aiosqlite database.
"""

import os
import sys
from typing import AsyncGenerator, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-for-the-attendify-suite"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from attendify.api.v1.deps import get_db
from attendify.core.security import ROLE_ADMIN, ROLE_EMPLOYEE, Authenticator, Identity
from attendify.db.base import Base
from attendify.main import app


@pytest.fixture
async def test_engine():
    """A fresh in-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Auth helpers ────────────────────────────────────────────────────
@pytest.fixture
def authenticator() -> Authenticator:
    return app.state.authenticator


@pytest.fixture
def employee_headers(authenticator) -> Callable[[str], dict[str, str]]:
    """Build bearer headers for an employee id."""

    def _headers(employee_id: str = "EMP-001") -> dict[str, str]:
        identity = Identity(subject=employee_id, role=ROLE_EMPLOYEE, employee_id=employee_id)
        return {"Authorization": f"Bearer {authenticator.issue_token(identity)}"}

    return _headers


@pytest.fixture
def admin_headers(authenticator) -> dict[str, str]:
    token = authenticator.issue_token(Identity(subject="admin", role=ROLE_ADMIN))
    return {"Authorization": f"Bearer {token}"}

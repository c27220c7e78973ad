"""
Ulyngo Backend — Test Configuration (conftest.py)
===================================================

Shared fixtures. No test needs a real database, Google credentials or
network access:
    - database sessions are AsyncMocks (get_db_session is overridden)
    - outbound APIs run through httpx.MockTransport or AsyncMock clients
    - bearer tokens are signed with the test JWT_SECRET below

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── app: fresh create_app() with get_db_session overridden
    ├── test_client: httpx AsyncClient over ASGITransport
    ├── user / admin: CurrentUser identities
    └── user_headers / admin_headers: Authorization headers for them
"""

import os

# Must run before any `app` import: Settings() and the engine are built at import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["GOOGLE_MAPS_API_KEY"] = "test-maps-key"
os.environ["GOOGLE_VERTEX_AI_PROJECT_ID"] = "test-project"
os.environ["GOOGLE_VERTEX_AI_LOCATION"] = "us-central1"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import get_db_session  # noqa: E402
from app.main import create_app  # noqa: E402
from app.schemas.auth import CurrentUser  # noqa: E402
from app.services.security import create_access_token  # noqa: E402


def db_result(first=None, scalar=None, scalars=None) -> MagicMock:
    """
    Builds what `await session.execute(...)` returns.

    first:   value of result.first()
    scalar:  value of result.scalar_one_or_none()
    scalars: list returned by result.scalars().all() (and iteration)
    """
    result = MagicMock()
    result.first.return_value = first
    result.scalar_one_or_none.return_value = scalar
    items = list(scalars or [])
    result.scalars.return_value.all.return_value = items
    result.scalars.return_value.__iter__.return_value = iter(items)
    return result


@pytest.fixture
def mock_db_session():
    """
    AsyncMock session. execute() returns an empty result unless a test sets
    `execute.return_value` or `execute.side_effect` (see db_result).
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=db_result())
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def app(mock_db_session):
    application = create_app()

    async def _session():
        yield mock_db_session

    application.dependency_overrides[get_db_session] = _session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def user():
    return CurrentUser(id=uuid4(), username="raffa", role="user")


@pytest.fixture
def admin():
    return CurrentUser(id=uuid4(), username="superadmin", role="admin")


def bearer(identity: CurrentUser) -> dict:
    token = create_access_token(identity.id, identity.username, identity.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(user):
    return bearer(user)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)

"""
Rutas Seguras Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (mocked DB, per-test SQLite app,
       API client, signed-in users).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session for service unit tests
    ├── app_settings:    Settings `app` is built from; test classes may override it
    ├── app:             FastAPI app bound to a throwaway SQLite file
    ├── test_client:     HTTPX AsyncClient talking to `app` over ASGI
    ├── db_session:      Direct session on the same database (seeding/asserting)
    └── admin_token / conductor_token / cliente_token: signed-in users
"""

import os

# Override settings for testing BEFORE any rutas_seguras imports
# Prevents tests from touching a real database or using the dev secret
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-key-for-the-suite-only-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost keeps hashing fast in tests
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import Any, Dict, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from rutas_seguras.config import settings  # noqa: E402
from rutas_seguras.main import create_app  # noqa: E402
from rutas_seguras.models.route import Route  # noqa: E402
from rutas_seguras.models.user import User  # noqa: E402
from rutas_seguras.security import hash_password  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Service unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_login(mock_db_session):
            mock_db_session.execute.return_value = result_returning(user)
            await auth_service.login(mock_db_session, settings, payload)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


def result_returning(value: Any) -> MagicMock:
    """A fake `Result` whose scalar_one_or_none() returns `value`."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


# ══════════════════════════════════════════════════════════════════════════
# Endpoint-test fixtures (real app on SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app_settings(tmp_path):
    """Settings the test app is built from, pointing at a per-test SQLite file."""
    return settings.model_copy(
        update={"database_url": f"sqlite+aiosqlite:///{tmp_path}/rutas_test.db"}
    )


@pytest_asyncio.fixture
async def app(app_settings):
    """A fresh app with its own SQLite file and all tables created."""
    application = create_app(app_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport routes requests directly to the app; no server runs.
    raise_app_exceptions=False lets tests observe the 500 envelope.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def db_session(app):
    """A session on the test database for seeding rows and checking results."""
    async with app.state.database.session_factory() as session:
        yield session


async def create_user(
    session,
    email: str,
    role: str = "cliente",
    password: str = "Secure1",
    name: str = "Test User",
    active: bool = True,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        active=active,
    )
    session.add(user)
    await session.commit()
    return user


async def create_route(session, **overrides: Any) -> Route:
    fields: Dict[str, Any] = {
        "title": "Centro - Norte",
        "origin": "Centro",
        "destination": "Norte",
        "distance_km": 12,
    }
    fields.update(overrides)
    route = Route(**fields)
    session.add(route)
    await session.commit()
    return route


async def reload(application, model, pk):
    """Read a row through a brand-new session, bypassing any identity-map cache."""
    async with application.state.database.session_factory() as session:
        return await session.get(model, pk)


async def login(client: AsyncClient, email: str, password: str = "Secure1") -> str:
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


def bearer(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await create_user(db_session, "admin@rutas.com", role="admin", name="Admin")


@pytest_asyncio.fixture
async def conductor_user(db_session):
    return await create_user(db_session, "driver@rutas.com", role="conductor", name="Driver")


@pytest_asyncio.fixture
async def cliente_user(db_session):
    return await create_user(db_session, "client@rutas.com", role="cliente", name="Client")


@pytest_asyncio.fixture
async def admin_token(test_client, admin_user):
    return await login(test_client, admin_user.email)


@pytest_asyncio.fixture
async def conductor_token(test_client, conductor_user):
    return await login(test_client, conductor_user.email)


@pytest_asyncio.fixture
async def cliente_token(test_client, cliente_user):
    return await login(test_client, cliente_user.email)

"""
RecipeHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite +
       StaticPool, so all sessions share one connection) with the full
       schema created from the ORM metadata.

Fixture Hierarchy (all function-scoped):
    engine
    └── session_factory
        ├── db_session:   session for service-level tests
        ├── users:        alice, bob, carol committed to the database
        └── client:       HTTPX AsyncClient against a fresh app whose
                          get_db_session is bound to this database
    recipe_data:  a valid camelCase recipe body
    auth_headers: builds an Authorization header for a user
    temp_storage / sample_image_bytes: file upload helpers
"""

import os
import tempfile
from types import SimpleNamespace

# Settings are read at import time; configure the environment first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="recipehub_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from recipehub.auth import create_access_token
from recipehub.database import Base, get_db_session
from recipehub.main import create_app
from recipehub.models import User


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_factory):
    """Three committed users. `users.alice.id` etc. are usable as request identities."""
    created = {
        name: User(
            name=name.capitalize(),
            email=f"{name}@example.com",
            avatar=f"https://avatars.example.com/{name}.png",
        )
        for name in ("alice", "bob", "carol")
    }
    async with session_factory() as session:
        session.add_all(created.values())
        await session.commit()
    return SimpleNamespace(**created)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(session_factory):
    """
    API client for a freshly built app.

    A new app per test also means a new rate limiter.
    """

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


# ══════════════════════════════════════════════════════════════════════════
# Payloads & files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def recipe_data():
    """A valid create-recipe body in the API's camelCase shape."""
    return {
        "title": "Soup",
        "description": "A quick vegetable soup",
        "ingredients": [{"name": "Carrot", "quantity": "2", "unit": "pcs"}],
        "instructions": [{"step": 1, "text": "Simmer everything for 20 minutes"}],
        "cookingTime": 20,
        "servings": 2,
        "tags": ["vegetarian"],
    }


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid PNG: signature plus IHDR/IEND chunks."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
        b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )

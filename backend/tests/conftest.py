"""
Catalog Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Environment variables are set before any catalog import so
       the settings singleton never points at a real database or Cloudinary
       account.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session:  AsyncMock session for pure unit tests
    ├── db_engine:        in-memory SQLite engine with every table created
    ├── db_session:       AsyncSession bound to db_engine
    ├── seeded_refs:      a Category + SubCategory products can point at
    ├── fake_cloudinary:  cloudinary.uploader.upload/destroy patched out
    ├── sample_image_bytes / image_payload
    └── test_client:      HTTPX AsyncClient wired to the app and db_engine
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import catalog.models  # noqa: E402,F401
from catalog.database import Base, get_db_session  # noqa: E402
from catalog.models import Category, SubCategory  # noqa: E402
from catalog.services.media_service import MediaPayload  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test doubles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    `get` returns a truthy MagicMock, so reference checks pass unless a test
    overrides it.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock(return_value=0)
    session.get = AsyncMock(return_value=MagicMock())
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_image_bytes():
    """PNG signature plus a little padding: enough for the local checks."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def image_payload(sample_image_bytes):
    return MediaPayload(
        filename="shoe.png",
        content=sample_image_bytes,
        content_type="image/png",
    )


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory SQLite database per test; StaticPool keeps one connection."""
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
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_refs(session_factory):
    """Commits one Category and one SubCategory; returns their ids."""
    async with session_factory() as session:
        category = Category(name="Footwear")
        session.add(category)
        await session.flush()
        sub_category = SubCategory(name="Sneakers", category_id=category.id)
        session.add(sub_category)
        await session.commit()
        return {"category_id": category.id, "sub_category_id": sub_category.id}


# ══════════════════════════════════════════════════════════════════════════
# Cloudinary
# ══════════════════════════════════════════════════════════════════════════

def _fake_upload(file, **options):
    public_id = f"{options.get('folder', 'catalog')}/{uuid4().hex}"
    return {
        "public_id": public_id,
        "secure_url": f"https://res.cloudinary.com/test-cloud/image/upload/{public_id}.png",
    }


@pytest.fixture
def fake_cloudinary():
    """
    Patches the Cloudinary SDK calls MediaService makes.

    Yields a namespace with `upload` and `destroy` mocks; set
    `upload.side_effect` to simulate provider failures.
    """
    with patch("cloudinary.uploader.upload", side_effect=_fake_upload) as upload, \
         patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
        yield MagicMock(upload=upload, destroy=destroy)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    get_db_session is overridden to use the per-test SQLite database with
    the same commit/rollback behavior as production. Unhandled exceptions
    come back as 500 responses instead of propagating into the test.
    """
    from catalog.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

"""
Pytest configuration and fixtures.

This file is automatically discovered by pytest and provides
shared fixtures for all test modules.

Every test gets its own in-memory SQLite database (aiosqlite) with all
tables created, so services can commit freely without leaking state
between tests.

References:
-----------
- Pytest Fixtures: https://docs.pytest.org/en/stable/fixture.html
- FastAPI Testing: https://fastapi.tiangolo.com/advanced/async-tests/
"""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lifestyle_cms.db.base import Base
from lifestyle_cms.db.deps import get_db, get_db_override
from lifestyle_cms.main import app
from lifestyle_cms.models.carousel import Carousel, PageType

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ================================
# Database Fixtures
# ================================

@pytest_asyncio.fixture
async def test_engine():
    """
    Create a test database engine.

    StaticPool keeps the single in-memory connection alive for the whole
    test; foreign keys are switched on so ON DELETE CASCADE behaves as
    it does in PostgreSQL.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,  # Set to True for SQL debugging
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a database session for each test.

    Configured like the application's session factory: no autoflush,
    attributes kept after commit.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session


# ================================
# FastAPI Client Fixtures
# ================================

@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing FastAPI endpoints.

    Overrides the get_db dependency to use the test database session.

    Usage:
        async def test_something(client: AsyncClient):
            response = await client.get("/api/v1/carousels?page=home")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_db] = get_db_override(db_session)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up
    app.dependency_overrides.clear()


# ================================
# Carousel Fixtures
# ================================

@pytest_asyncio.fixture
async def favorites(db_session: AsyncSession) -> Carousel:
    """An empty ordered carousel: recipes/recipes-favorites."""
    carousel = Carousel(page=PageType.RECIPES, slug="recipes-favorites", title="Favorites")
    db_session.add(carousel)
    await db_session.commit()
    return carousel


@pytest_asyncio.fixture
async def weekly_pick(db_session: AsyncSession) -> Carousel:
    """An empty singleton slot: recipes/recipes-weekly-pick."""
    carousel = Carousel(page=PageType.RECIPES, slug="recipes-weekly-pick", title="Recipe of the Week")
    db_session.add(carousel)
    await db_session.commit()
    return carousel

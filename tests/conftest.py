"""Test configuration and fixtures for sqlcamel."""

from dotenv import load_dotenv
import pytest
import os
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from tests.models import Base

# Try to load environment variables from .env file
load_dotenv()


@pytest.fixture(scope="function")
async def engine():
    """Create a test database engine for each test function."""
    # SQLCAMEL_TEST_DATABASE_URL points the suite at an external async database
    test_db_url = os.getenv('SQLCAMEL_TEST_DATABASE_URL')

    if test_db_url:
        engine = create_async_engine(
            test_db_url,
            echo=False,
            future=True,
            pool_pre_ping=True,
        )
        # Ensure a clean slate before tests: drop then create all tables
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = True
        print(f"Using external database: {test_db_url}")
    else:
        # Use in-memory SQLite for tests
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=False,
            future=True,
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        is_external_db = False

    yield engine

    # Clean up: for external databases, drop all tables
    if is_external_db:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test function."""
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session


# Import fixtures from fixtures module
from tests.fixtures import (  # noqa: E402,F401
    sample_users,
    sample_posts,
    populated_db,
)

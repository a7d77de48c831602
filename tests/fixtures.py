"""Database fixtures for sqlcamel tests (shared)."""

import pytest
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User, Post, Role, RoleUser


async def create_sample_users(session: AsyncSession):
    """Create and commit the sample users used across tests."""
    users = [
        User(first_name="Alice", last_name="Johnson", email="alice@example.com", api_token="tok-alice", is_admin=True),
        User(first_name="Bob", last_name="Smith", email="bob@example.com", api_token="tok-bob"),
        User(first_name="Charlie", last_name="Brown", email="charlie@example.com"),
    ]
    session.add_all(users)
    await session.flush()
    await session.commit()
    return users


@pytest.fixture(scope="function")
async def sample_users(db_session: AsyncSession):
    return await create_sample_users(db_session)


async def create_sample_posts(session: AsyncSession, users):
    """Create and commit sample posts with deterministic timestamps."""
    alice, bob, _ = users
    base = datetime(2024, 1, 15, 9, 0, 0)
    posts = [
        Post(title="First Post", author_id=alice.id, published_at=base),
        Post(title="Second Post", author_id=alice.id, published_at=base + timedelta(days=1)),
        Post(title="Draft", author_id=bob.id, published_at=None),
    ]
    session.add_all(posts)
    await session.flush()
    await session.commit()
    return posts


@pytest.fixture(scope="function")
async def sample_posts(db_session: AsyncSession, sample_users):
    return await create_sample_posts(db_session, sample_users)


async def create_sample_roles(session: AsyncSession, users):
    alice, bob, _ = users
    roles = [Role(name="Editor", role_code="ed"), Role(name="Viewer", role_code="vw")]
    session.add_all(roles)
    await session.flush()
    links = [
        RoleUser(user_id=alice.id, role_id=roles[0].id, granted_by="system"),
        RoleUser(user_id=bob.id, role_id=roles[1].id, granted_by="alice"),
    ]
    session.add_all(links)
    await session.flush()
    await session.commit()
    return roles, links


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession, sample_users, sample_posts):
    roles, links = await create_sample_roles(db_session, sample_users)
    return {
        'users': sample_users,
        'posts': sample_posts,
        'roles': roles,
        'role_links': links,
    }

"""
Basic example of using sqlcamel with SQLAlchemy.

This example demonstrates:
- Declaring snake_case models that speak camelCase to application code
- Creating and looking up rows with camelCase payloads
- Serializing models (and loaded relationships) to camelCase dicts/JSON
- Linking rows that follow the casing of the entity governing them
"""

import asyncio
import logging
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, relationship, selectinload

from sqlcamel import CamelCasing, Model, Pivot, attach_pivot


# SQLAlchemy Models
class Base(Model, DeclarativeBase):
    pass


class User(CamelCasing, Base):
    __tablename__ = 'users'
    __hidden__ = ('apiToken',)
    __fillable__ = ('firstName', 'lastName', 'email', 'apiToken')

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    email = Column(String(255), unique=True, nullable=False)
    api_token = Column(String(64))
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationship to posts
    posts = relationship("Post", back_populates="author")


class Post(CamelCasing, Base):
    __tablename__ = 'posts'
    __fillable__ = ('title', 'authorId')

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    author_id = Column(Integer, ForeignKey('users.id'), nullable=False)

    # Relationship to user
    author = relationship("User", back_populates="posts")


class Team(CamelCasing, Base):
    __tablename__ = 'teams'
    __fillable__ = ('teamName',)

    id = Column(Integer, primary_key=True)
    team_name = Column(String(100), nullable=False)


class TeamMember(CamelCasing, Pivot, Base):
    __tablename__ = 'team_members'
    __parent_relationship__ = 'user'
    enforce_camel_case = False

    user_id = Column(Integer, ForeignKey('users.id'), primary_key=True)
    team_id = Column(Integer, ForeignKey('teams.id'), primary_key=True)
    member_role = Column(String(50))

    user = relationship("User")


async def main():
    """Main demo function."""
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s")
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        # camelCase payloads are stored in snake_case columns
        alice = await User.create(session, {
            'firstName': 'Alice',
            'lastName': 'Johnson',
            'email': 'alice@example.com',
            'apiToken': 'secret',
        })
        await Post.create(session, {'title': 'First Post', 'authorId': alice.id})
        await Post.create(session, {'title': 'Second Post', 'authorId': alice.id})
        team = await Team.create(session, {'teamName': 'Core'})
        member = await TeamMember.force_create(session, {'userId': alice.id, 'teamId': team.id, 'memberRole': 'lead'})
        await session.commit()

        # Lookups accept camelCase keys as well
        same = await User.first_or_create(session, {'firstName': 'Alice'})
        print("first_or_create found existing:", same is alice)

        stmt = (
            select(User)
            .options(selectinload(User.posts))
            .where(User.id == alice.id)
            .execution_options(populate_existing=True)
        )
        loaded = (await session.execute(stmt)).scalar_one()
        print("User as JSON:", loaded.to_json(indent=2))

        # The linking row has camelCase disabled but follows its user
        print("Team member:", member.to_dict())
        print("Team with pivot columns:", attach_pivot(team, member).to_dict())

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())

"""Database models for sqlcamel tests (shared)."""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlcamel import CamelCasing, Model, Pivot


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(Model, DeclarativeBase):
    """Base class for test models."""
    pass


class User(CamelCasing, Base):
    """Application users, declared with camelCase hidden/date/fillable lists."""
    __tablename__ = 'users'
    __hidden__ = ('apiToken',)
    __dates__ = ('lastLoginAt',)
    __fillable__ = ('firstName', 'lastName', 'email', 'apiToken', 'isAdmin', 'lastLoginAt')
    __accessors__ = ('display_name',)

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, nullable=False)
    api_token = Column(String(64), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    last_login_at = Column(DateTime, nullable=True)

    posts = relationship("Post", back_populates="author")
    role_links = relationship("RoleUser", back_populates="user")

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}"


class Post(CamelCasing, Base):
    __tablename__ = 'posts'
    __fillable__ = ('title', 'authorId', 'publishedAt')

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    author_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    published_at = Column(DateTime, nullable=True)

    author = relationship("User", back_populates="posts")


class Role(CamelCasing, Base):
    __tablename__ = 'roles'
    __fillable__ = ('name', 'roleCode')

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    role_code = Column(String(20), nullable=True)


class RoleUser(CamelCasing, Pivot, Base):
    """Linking row between users and roles; follows the user's casing."""
    __tablename__ = 'role_user'
    __parent_relationship__ = 'user'
    enforce_camel_case = False

    user_id = Column(Integer, ForeignKey('users.id'), primary_key=True)
    role_id = Column(Integer, ForeignKey('roles.id'), primary_key=True)
    granted_by = Column(String(100), nullable=True)

    user = relationship("User", back_populates="role_links")
    role = relationship("Role")


class AuditEntry(Base):
    """Plain model without the casing mixin; keys stay snake_case."""
    __tablename__ = 'audit_entries'

    id = Column(Integer, primary_key=True)
    event_name = Column(String(100), nullable=False)
    occurred_at = Column(DateTime, default=_utcnow)

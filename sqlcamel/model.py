"""Active-record style attribute pipeline on top of SQLAlchemy declarative models.

``Model`` is a mixin for a ``DeclarativeBase``::

    class Base(Model, DeclarativeBase):
        pass

It gives every mapped instance a small, explicit attribute API
(``set_attribute``/``get_attribute``), array/JSON serialization honouring
hidden and date declarations, mass-assignment guarding and async persistence
helpers keyed by plain attribute mappings. Keys at this layer are always the
mapped attribute names exactly as declared on the model; the casing mixin in
:mod:`sqlcamel.casing` sits in front of it and rewrites keys at every
boundary.
"""
from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .core.utils import coerce_date_value, ensure_list, is_date_column, serialize_date_value

logger = logging.getLogger(__name__)

__all__ = ['Model', 'MassAssignmentError', 'column_keys']

# ids of instances currently being serialized by relations_to_dict (per context)
_serializing: ContextVar[FrozenSet[int]] = ContextVar('sqlcamel_serializing', default=frozenset())


class MassAssignmentError(ValueError):
    """Raised when mass-assigning a key on a model that is totally guarded."""


def column_keys(model_cls) -> List[str]:
    """Mapped column attribute keys of ``model_cls`` in mapper order."""
    return [prop.key for prop in sa_inspect(model_cls).column_attrs]


class Model:
    """Attribute store, serialization and persistence API for mapped classes."""

    __hidden__ = ()
    __dates__ = ()
    __fillable__ = ()
    __guarded__ = ('*',)
    # Extra names resolved like relationships (properties or zero-arg methods)
    __accessors__ = ()

    # --- attribute store ---------------------------------------------------------
    def set_attribute(self, key: str, value: Any) -> None:
        if key in self.get_dates():
            value = coerce_date_value(self._column_for(key), value)
        setattr(self, key, value)

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Read ``key`` from the attribute store without emitting SQL.

        Columns and relationships that are not loaded on a persistent instance
        report ``default``; use :meth:`load_relations` to fetch them first.
        """
        if not key:
            return default
        if key in sa_inspect(type(self)).column_attrs:
            return self._read_loaded(key, default)
        if key in self.relation_names():
            return self.get_relation_value(key, default)
        if self._is_dynamic_key(key):
            return sa_inspect(self).dict.get(key, default)
        return default

    def get_relation_value(self, key: str, default: Any = None) -> Any:
        """Return the related value for ``key``.

        Relationships are only read from loaded state. Accessors declared in
        ``__accessors__`` are evaluated, calling them when they are methods.
        """
        if key in sa_inspect(type(self)).relationships:
            return self._read_loaded(key, default)
        value = getattr(self, key)
        return value() if callable(value) else value

    def _read_loaded(self, key: str, default: Any) -> Any:
        state = sa_inspect(self)
        if key in state.dict:
            return state.dict[key]
        if state.key is None:
            # transient and pending instances have nothing to load
            return getattr(self, key)
        logger.debug("get_attribute %s: %r is not loaded", type(self).__name__, key)
        return default

    def _is_dynamic_key(self, key: str) -> bool:
        """Whether ``key`` names a value written with set_attribute that the class does not declare."""
        return not key.startswith('_') and not hasattr(type(self), key)

    async def load_relations(self, session: AsyncSession, *keys: str) -> 'Model':
        """Load relationships ``keys`` (every relationship when empty) into this instance."""
        names = list(keys) or list(sa_inspect(type(self)).relationships.keys())
        await session.refresh(self, names)
        logger.debug("load_relations %s: loaded %s", type(self).__name__, names)
        return self

    @classmethod
    def relation_names(cls) -> FrozenSet[str]:
        names = set(sa_inspect(cls).relationships.keys())
        names.update(ensure_list(cls.__accessors__) or [])
        return frozenset(names)

    def get_attributes(self) -> Dict[str, Any]:
        return self._storage_attributes()

    def _storage_attributes(self) -> Dict[str, Any]:
        loaded = sa_inspect(self).dict
        out: Dict[str, Any] = {}
        for key in column_keys(type(self)):
            if key in loaded:
                out[key] = loaded[key]
        # pivot_* bookkeeping and other keys written with set_attribute
        for key, value in loaded.items():
            if self._is_dynamic_key(key):
                out[key] = value
        return out

    def _column_for(self, key: str):
        props = sa_inspect(type(self)).column_attrs
        if key not in props:
            return None
        return props[key].columns[0]

    def get_original(self, key: Optional[str] = None, default: Any = None) -> Any:
        """Committed values of loaded columns, before any pending change."""
        state = sa_inspect(self)
        original: Dict[str, Any] = {}
        for name in column_keys(type(self)):
            hist = state.attrs[name].history
            if hist.deleted:
                original[name] = hist.deleted[0]
            elif hist.unchanged:
                original[name] = hist.unchanged[0]
        if key is None:
            return original
        return original.get(key, default)

    def get_dirty(self) -> Dict[str, Any]:
        state = sa_inspect(self)
        dirty: Dict[str, Any] = {}
        for name in column_keys(type(self)):
            hist = state.attrs[name].history
            if hist.added:
                dirty[name] = hist.added[0]
        return dirty

    def get_parent(self) -> Any:
        return None

    def __contains__(self, key: str) -> bool:
        return self.get_attribute(key) is not None

    # --- declarations --------------------------------------------------------------
    def get_hidden(self) -> List[str]:
        return list(ensure_list(self.__hidden__) or [])

    def get_dates(self) -> List[str]:
        """Declared date keys plus every Date/DateTime column."""
        dates = list(ensure_list(self.__dates__) or [])
        for prop in sa_inspect(type(self)).column_attrs:
            if prop.key not in dates and any(is_date_column(c) for c in prop.columns):
                dates.append(prop.key)
        return dates

    def get_fillable(self) -> List[str]:
        return list(ensure_list(self.__fillable__) or [])

    def get_guarded(self) -> List[str]:
        return list(ensure_list(self.__guarded__) or [])

    def is_guarded(self, key: str) -> bool:
        guarded = self.get_guarded()
        return key in guarded or guarded == ['*']

    def totally_guarded(self) -> bool:
        return not self.get_fillable() and self.get_guarded() == ['*']

    def is_fillable(self, key: str) -> bool:
        fillable = self.get_fillable()
        if key in fillable:
            return True
        if self.is_guarded(key):
            return False
        return not fillable and not key.startswith('_')

    # --- mass assignment -------------------------------------------------------------
    def fill(self, attributes: Mapping[str, Any]) -> 'Model':
        totally_guarded = self.totally_guarded()
        for key, value in attributes.items():
            if self.is_fillable(key):
                self.set_attribute(key, value)
            elif totally_guarded:
                raise MassAssignmentError(
                    f"Add [{key}] to __fillable__ to allow mass assignment on {type(self).__name__}"
                )
            else:
                logger.debug("fill %s: discarded guarded key %r", type(self).__name__, key)
        return self

    def force_fill(self, attributes: Mapping[str, Any]) -> 'Model':
        for key, value in attributes.items():
            self.set_attribute(key, value)
        return self

    # --- serialization -----------------------------------------------------------------
    def attributes_to_dict(self) -> Dict[str, Any]:
        hidden = set(self.get_hidden())
        dates = set(self.get_dates())
        out: Dict[str, Any] = {}
        for key, value in self._storage_attributes().items():
            if key in hidden:
                continue
            out[key] = serialize_date_value(value) if key in dates else value
        return out

    def relations_to_dict(self) -> Dict[str, Any]:
        """Serialize loaded relationships; never triggers a load.

        Objects already being serialized further up the chain are left out so
        that bidirectional relationships terminate.
        """
        seen = _serializing.get() | {id(self)}
        token = _serializing.set(seen)
        try:
            hidden = set(self.get_hidden())
            loaded = sa_inspect(self).dict
            out: Dict[str, Any] = {}
            for key in sa_inspect(type(self)).relationships.keys():
                if key in hidden or key not in loaded:
                    continue
                value = loaded[key]
                if value is None:
                    out[key] = None
                elif isinstance(value, Model):
                    if id(value) not in seen:
                        out[key] = value.to_dict()
                else:
                    out[key] = [
                        item.to_dict() if isinstance(item, Model) else item
                        for item in value
                        if id(item) not in seen
                    ]
            return out
        finally:
            _serializing.reset(token)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.attributes_to_dict(), **self.relations_to_dict()}

    def to_json(self, **kwargs: Any) -> str:
        kwargs.setdefault('default', str)
        return json.dumps(self.to_dict(), **kwargs)

    # --- persistence -------------------------------------------------------------------
    @classmethod
    def new_instance(cls, attributes: Optional[Mapping[str, Any]] = None, *, force: bool = False):
        instance = cls()
        if attributes:
            if force:
                instance.force_fill(attributes)
            else:
                instance.fill(attributes)
        return instance

    @classmethod
    async def _first_where(cls, session: AsyncSession, attributes: Mapping[str, Any]):
        result = await session.execute(select(cls).filter_by(**attributes).limit(1))
        return result.scalars().first()

    @classmethod
    async def create(cls, session: AsyncSession, attributes: Optional[Mapping[str, Any]] = None):
        """Build, add and flush a new instance. The caller owns the transaction."""
        instance = cls.new_instance(attributes or {})
        session.add(instance)
        await session.flush()
        logger.debug("create %s: flushed new row", cls.__name__)
        return instance

    @classmethod
    async def force_create(cls, session: AsyncSession, attributes: Mapping[str, Any]):
        instance = cls.new_instance(attributes, force=True)
        session.add(instance)
        await session.flush()
        logger.debug("force_create %s: flushed new row", cls.__name__)
        return instance

    @classmethod
    async def first_or_create(
        cls,
        session: AsyncSession,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
    ):
        instance = await cls._first_where(session, attributes)
        if instance is not None:
            logger.debug("first_or_create %s: found existing row", cls.__name__)
            return instance
        return await cls.create(session, {**attributes, **(values or {})})

    @classmethod
    async def first_or_new(
        cls,
        session: AsyncSession,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
    ):
        """Return the first matching row, or an unsaved instance filled from the arguments."""
        instance = await cls._first_where(session, attributes)
        if instance is None:
            logger.debug("first_or_new %s: no match, built new instance", cls.__name__)
            instance = cls.new_instance({**attributes, **(values or {})})
        return instance

    @classmethod
    async def update_or_create(
        cls,
        session: AsyncSession,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
    ):
        instance = await cls.first_or_new(session, attributes)
        instance.fill(values or {})
        session.add(instance)
        await session.flush()
        logger.debug("update_or_create %s: flushed", cls.__name__)
        return instance

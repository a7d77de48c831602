"""camelCase attribute access for snake_case schemas.

``CamelCasing`` is a mixin placed in front of a :class:`sqlcamel.model.Model`
base::

    class User(CamelCasing, Base):
        __tablename__ = 'users'
        first_name = Column(String(100))

    user = User.new_instance({'firstName': 'Ann'})
    user.firstName            # 'Ann'
    user.to_dict()            # {'firstName': 'Ann', ...}

Keys coming from application code are converted to snake_case before they reach
the model's attribute store, and keys leaving the store are converted back to
camelCase. The stored keys themselves are never rewritten. Keys carrying the
``pivot_`` prefix are left alone in the outbound direction because many-to-many
bookkeeping depends on their literal form.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from .naming import camel_to_snake, is_pivot_key, keys_to_camel, keys_to_snake, snake_list, snake_to_camel

__all__ = ['CamelCasing', 'SupportsCamelCase']


@runtime_checkable
class SupportsCamelCase(Protocol):
    def is_camel_case(self) -> bool: ...


def _unique(names: List[str]) -> List[str]:
    return list(dict.fromkeys(names))


@lru_cache(maxsize=4096)
def _mapped_storage_key(model_cls: type, key: str) -> Optional[str]:
    """snake_case column or relationship of ``model_cls`` that ``key`` spells in camelCase."""
    storage_key = camel_to_snake(key)
    if storage_key == key:
        return None
    mapper = sa_inspect(model_cls, raiseerr=False)
    if mapper is None:
        return None
    if storage_key in mapper.column_attrs or storage_key in mapper.relationships:
        return storage_key
    return None


class CamelCasing:
    """Expose model attributes in camelCase while storing them in snake_case."""

    # Per-instance override is allowed: ``user.enforce_camel_case = False``
    enforce_camel_case = True

    # --- attribute store ---------------------------------------------------------
    def set_attribute(self, key: str, value: Any) -> None:
        super().set_attribute(self.get_snake_key(key), value)

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Read ``key`` in any casing.

        Names declared as relationships or accessors are resolved as-is; every
        other key is looked up by its snake_case form.
        """
        if key in self.relation_names():
            return self.get_relation_value(key, default)
        return super().get_attribute(self.get_snake_key(key), default)

    def attributes_to_dict(self) -> Dict[str, Any]:
        return self.to_camel_case(super().attributes_to_dict())

    def get_attributes(self) -> Dict[str, Any]:
        return self.attributes_to_dict()

    def relations_to_dict(self) -> Dict[str, Any]:
        return self.to_camel_case(super().relations_to_dict())

    def get_original(self, key: Optional[str] = None, default: Any = None) -> Any:
        original = self.to_camel_case(super().get_original())
        if key is None:
            return original
        return original.get(self.get_true_key(key), default)

    def get_dirty(self) -> Dict[str, Any]:
        return self.to_camel_case(super().get_dirty())

    def __contains__(self, key: str) -> bool:
        return super().__contains__(self.get_snake_key(key))

    async def load_relations(self, session: AsyncSession, *keys: str):
        names = [key if key in self.relation_names() else self.get_snake_key(key) for key in keys]
        return await super().load_relations(session, *names)

    # --- declarations --------------------------------------------------------------
    # Declarations may be written in either casing; the model layer matches
    # against stored keys, so they are handed over in snake_case.
    def get_hidden(self) -> List[str]:
        return _unique(snake_list(super().get_hidden()))

    def get_dates(self) -> List[str]:
        return _unique(snake_list(super().get_dates()))

    def get_fillable(self) -> List[str]:
        return _unique(snake_list(super().get_fillable()))

    def get_guarded(self) -> List[str]:
        return _unique(snake_list(super().get_guarded()))

    def is_fillable(self, key: str) -> bool:
        return super().is_fillable(self.get_snake_key(key))

    # --- key conversion ----------------------------------------------------------------
    def to_camel_case(self, attributes: Mapping[Any, Any]) -> Dict[Any, Any]:
        return keys_to_camel(attributes, self.get_true_key)

    @staticmethod
    def to_snake_case(attributes: Mapping[Any, Any]) -> Dict[Any, Any]:
        return keys_to_snake(attributes)

    def get_true_key(self, key: Any) -> Any:
        if is_pivot_key(key):
            return key
        if self.is_camel_case():
            return snake_to_camel(key)
        return key

    def is_camel_case(self) -> bool:
        """Whether this instance, or the entity governing it, enforces camelCase."""
        if self.enforce_camel_case:
            return True
        parent = self.get_parent()
        return isinstance(parent, SupportsCamelCase) and parent.is_camel_case()

    def get_snake_key(self, key: Any) -> Any:
        return camel_to_snake(key)

    # --- attribute access sugar ------------------------------------------------------
    def _mapped_storage_key(self, key: str) -> Optional[str]:
        if key.startswith('_'):
            return None
        return _mapped_storage_key(type(self), key)

    def __getattr__(self, key: str) -> Any:
        # only reached when normal lookup failed, i.e. for camelCase names
        if self._mapped_storage_key(key) is not None:
            return self.get_attribute(key)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {key!r}")

    def __setattr__(self, key: str, value: Any) -> None:
        storage_key = self._mapped_storage_key(key)
        super().__setattr__(storage_key or key, value)

    # --- persistence -------------------------------------------------------------------
    @classmethod
    async def create(cls, session: AsyncSession, attributes: Optional[Mapping[str, Any]] = None):
        return await super().create(session, cls.to_snake_case(attributes or {}))

    @classmethod
    async def force_create(cls, session: AsyncSession, attributes: Mapping[str, Any]):
        return await super().force_create(session, cls.to_snake_case(attributes))

    @classmethod
    async def first_or_create(
        cls,
        session: AsyncSession,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
    ):
        return await super().first_or_create(session, cls.to_snake_case(attributes), values)

    @classmethod
    async def first_or_new(
        cls,
        session: AsyncSession,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
    ):
        return await super().first_or_new(session, cls.to_snake_case(attributes), values)

    @classmethod
    async def update_or_create(
        cls,
        session: AsyncSession,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
    ):
        # values are filled through set_attribute, which converts keys itself
        return await super().update_or_create(session, cls.to_snake_case(attributes), values)

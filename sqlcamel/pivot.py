"""Many-to-many linking records.

A ``Pivot`` is an association model that knows which entity governs it. The
reference is kept weakly so a pivot never keeps its parent alive, and it is
consulted by :meth:`sqlcamel.casing.CamelCasing.is_camel_case` so linking rows
follow the casing convention of the entity they were reached from.

``attach_pivot`` performs the bookkeeping that exposes the association's
columns on the related entity as ``pivot_<column>`` attributes.
"""
from __future__ import annotations

import weakref
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import inspect as sa_inspect

from .model import Model, column_keys
from .naming import PIVOT_PREFIX

__all__ = ['Pivot', 'attach_pivot']


class Pivot(Model):
    """Base for association entities.

    Set ``__parent_relationship__`` to the name of the relationship pointing at
    the governing entity to have it picked up from loaded state when no
    explicit parent was bound with :meth:`set_parent`.
    """

    __parent_relationship__ = None
    __guarded__ = ()

    def set_parent(self, parent: Any) -> None:
        self._pivot_parent = weakref.ref(parent) if parent is not None else None

    def get_parent(self) -> Any:
        ref = sa_inspect(self).dict.get('_pivot_parent')
        if ref is not None:
            parent = ref()
            if parent is not None:
                return parent
        name = self.__parent_relationship__
        if not name:
            return None
        # resolving the parent must never emit SQL: loaded state, then identity map
        state = sa_inspect(self)
        if name in state.dict:
            return state.dict[name]
        return _parent_from_identity_map(state, state.mapper.relationships[name])

    @classmethod
    def from_parent(cls, parent: Any, attributes: Optional[Mapping[str, Any]] = None):
        instance = cls()
        instance.set_parent(parent)
        if attributes:
            instance.force_fill(attributes)
        return instance


def _parent_from_identity_map(state, rel) -> Any:
    """Return the many-to-one target of ``rel`` if it is already in the session."""
    session = state.session
    if session is None:
        return None
    local_for_remote = {remote: local for local, remote in rel.local_remote_pairs}
    ident = []
    for pk_col in rel.mapper.primary_key:
        local = local_for_remote.get(pk_col)
        if local is None:
            return None
        value = state.dict.get(state.mapper.get_property_by_column(local).key)
        if value is None:
            return None
        ident.append(value)
    key = rel.mapper.identity_key_from_primary_key(ident)
    return session.identity_map.get(key)


def attach_pivot(related: Model, pivot: Model, columns: Optional[Iterable[str]] = None) -> Model:
    """Copy ``pivot`` column values onto ``related`` as ``pivot_<column>`` attributes.

    ``columns`` defaults to every mapped column of the pivot. Returns ``related``.
    """
    keys = list(columns) if columns is not None else column_keys(type(pivot))
    for key in keys:
        related.set_attribute(PIVOT_PREFIX + key, pivot.get_attribute(key))
    return related

from __future__ import annotations
from datetime import date, datetime
from typing import Any, List, Optional

from sqlalchemy.sql.sqltypes import Date, DateTime

__all__ = [
    'is_date_column',
    'coerce_date_value',
    'serialize_date_value',
    'ensure_list',
]


def is_date_column(col) -> bool:
    ctype = getattr(col, 'type', None)
    return isinstance(ctype, (DateTime, Date))


def coerce_date_value(col, val: Any) -> Any:
    """Best-effort coercion of an ISO string to the python value a date column expects.

    ``col`` may be None when the key was declared as a date but is not backed by
    a typed column; a datetime is produced in that case. Values that do not
    parse are returned untouched and left for the database driver to reject.
    """
    if not isinstance(val, str):
        return val
    s = val.replace('Z', '+00:00') if 'Z' in val else val
    ctype = getattr(col, 'type', None)
    try:
        if isinstance(ctype, Date) and not isinstance(ctype, DateTime):
            return date.fromisoformat(s[:10])
        dv = datetime.fromisoformat(s)
    except ValueError:
        return val
    if isinstance(ctype, DateTime) and not getattr(ctype, 'timezone', False) and dv.tzinfo is not None:
        dv = dv.replace(tzinfo=None)
    return dv


def serialize_date_value(val: Any) -> Any:
    if isinstance(val, (datetime, date)):
        return val.isoformat()
    return val


def ensure_list(value: Any) -> Optional[List[Any]]:
    """Wrap scalars into a list, preserving list inputs."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    return [value]

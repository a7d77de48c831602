"""camelCase attribute access for SQLAlchemy models backed by snake_case schemas.

Public API:
- Model, Pivot, attach_pivot, MassAssignmentError (attribute pipeline)
- CamelCasing, SupportsCamelCase (casing mixin)
- camel_to_snake, snake_to_camel, keys_to_camel, keys_to_snake, PIVOT_PREFIX (naming helpers)
"""
from .model import Model, MassAssignmentError
from .pivot import Pivot, attach_pivot
from .casing import CamelCasing, SupportsCamelCase
from .naming import PIVOT_PREFIX, camel_to_snake, snake_to_camel, keys_to_camel, keys_to_snake

__all__ = [
    'Model', 'Pivot', 'attach_pivot', 'MassAssignmentError',
    'CamelCasing', 'SupportsCamelCase',
    'PIVOT_PREFIX', 'camel_to_snake', 'snake_to_camel', 'keys_to_camel', 'keys_to_snake',
]

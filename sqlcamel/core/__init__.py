# Core subpackage for sqlcamel: value helpers shared by the model layer.
from .utils import is_date_column, coerce_date_value, serialize_date_value, ensure_list

__all__ = ['is_date_column', 'coerce_date_value', 'serialize_date_value', 'ensure_list']

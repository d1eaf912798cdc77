from .factory import get_schema, new_record
from .types import CaseType

__all__ = ["CaseType", "get_schema", "new_record"]

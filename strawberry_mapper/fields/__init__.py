from .builder import FieldsBuilder
from .field import MappedField, field, mutation, query

__all__ = [
    "FieldsBuilder",
    "MappedField",
    "field",
    "mutation",
    "query",
]

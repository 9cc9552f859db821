from .types import FieldDescriptor, OneOfMembership
from .flatten import flatten_schema, field_map

__all__ = [
    "FieldDescriptor",
    "OneOfMembership",
    "flatten_schema",
    "field_map",
]

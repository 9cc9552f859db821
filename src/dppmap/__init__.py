"""
dppmap: map tabular rows onto a resolved JSON Schema and emit nested
documents.

Core (no I/O): dppmap.schema, dppmap.match, dppmap.emit.
Edges: dppmap.io, dppmap.cli.
"""
from .schema import FieldDescriptor, OneOfMembership, flatten_schema
from .match import (
    MappingSession,
    compute_match_score,
    generate_auto_mapping,
    validate_mapping_constraints,
)
from .emit import generate_documents, materialize_row
from .config import MapperConfig

__version__ = "0.1.0"

__all__ = [
    "FieldDescriptor",
    "OneOfMembership",
    "flatten_schema",
    "MappingSession",
    "compute_match_score",
    "generate_auto_mapping",
    "validate_mapping_constraints",
    "generate_documents",
    "materialize_row",
    "MapperConfig",
]

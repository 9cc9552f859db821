from .score import SYNONYM_MAP, compute_match_score, normalize
from .automap import (
    MappingSession,
    MatchCandidate,
    IndexedSuggestion,
    generate_auto_mapping,
    resolve_array_indices,
    find_best_match,
    find_used_indices,
    generate_indexed_suggestions,
)
from .conflicts import ConflictGroup, validate_mapping_constraints
from .profile import ColumnProfile, analyze_column_data, is_type_compatible, validate_value
from .required import get_missing_required_fields

__all__ = [
    "SYNONYM_MAP",
    "compute_match_score",
    "normalize",
    "MappingSession",
    "MatchCandidate",
    "IndexedSuggestion",
    "generate_auto_mapping",
    "resolve_array_indices",
    "find_best_match",
    "find_used_indices",
    "generate_indexed_suggestions",
    "ConflictGroup",
    "validate_mapping_constraints",
    "ColumnProfile",
    "analyze_column_data",
    "is_type_compatible",
    "validate_value",
    "get_missing_required_fields",
]

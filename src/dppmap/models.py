from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

class MappingFile(BaseModel):
    # Persisted header -> path mapping for one CSV layout
    schema_version: str = Field(default='0.1.0')
    sector: List[str] = Field(default_factory=list)
    mapping: Dict[str, Optional[str]]  # null marks a header left unmapped
    conflicts: List[List[str]] = Field(default_factory=list)
    unmatched: List[str] = Field(default_factory=list)
    missing_required: List[str] = Field(default_factory=list)

class FieldRecord(BaseModel):
    # One flattened schema field, as printed by `dppmap fields --json`
    path: str
    isArray: bool = False
    type: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[List[Any]] = None
    oneOf: List[Dict[str, Any]] = Field(default_factory=list)
    required: bool = False
    minItems: Optional[int] = None

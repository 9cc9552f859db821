from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dppmap.schema.types import FieldDescriptor

BOOL_TOKENS = {"true", "false", "yes", "no", "0", "1"}
SAMPLE_LIMIT = 100

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$",
    re.ASCII | re.IGNORECASE,
)
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URI_RE = re.compile(r"^[a-z][a-z0-9+.-]*:\S+$", re.IGNORECASE)
_URI_REF_RE = re.compile(r"^([a-z][a-z0-9+.-]*:\S+|/\S*)$", re.IGNORECASE)

# checked in order; the first pattern every value matches wins
FORMAT_PATTERNS = (
    ("date-time", _DATE_RE),
    ("email", _EMAIL_RE),
    ("uri", _URI_RE),
    ("uri-reference", _URI_REF_RE),
)


@dataclass(frozen=True)
class ColumnProfile:
    type: str                   # empty|boolean|integer|number|string
    format: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        d = {"type": self.type}
        if self.format:
            d["format"] = self.format
        return d


def _as_number(s: str) -> Optional[float]:
    if not _NUMBER_RE.match(s):
        return None
    num = float(s)
    return num if math.isfinite(num) else None


def analyze_column_data(rows: Iterable[Mapping[str, Any]], header: str) -> ColumnProfile:
    """
    Infer the type (and string format) of one column from its values.

    Blank and missing cells are ignored and at most SAMPLE_LIMIT non-blank
    cells are inspected; a column with nothing else is "empty". Precedence:
    boolean > integer > number > date-time > email > uri > uri-reference >
    string, so a column of only 0/1 reads as boolean.
    """
    if not rows or not header:
        return ColumnProfile("empty")

    values: List[str] = []
    for row in rows:
        if len(values) >= SAMPLE_LIMIT:
            break
        v = row.get(header)
        if v is None:
            continue
        s = str(v).strip()
        if s:
            values.append(s)
    if not values:
        return ColumnProfile("empty")

    if all(v.lower() in BOOL_TOKENS for v in values):
        return ColumnProfile("boolean")
    numbers = [_as_number(v) for v in values]
    if all(n is not None for n in numbers):
        if all(n.is_integer() for n in numbers):
            return ColumnProfile("integer")
        return ColumnProfile("number")

    for fmt, pattern in FORMAT_PATTERNS:
        if all(pattern.match(v) for v in values):
            return ColumnProfile("string", fmt)
    return ColumnProfile("string")


# ---------------------------------------------------------------------------
# Column -> field compatibility
# ---------------------------------------------------------------------------

# column type -> schema types it may populate
_TYPE_MATRIX = {
    "boolean": {"boolean", "string"},
    "integer": {"integer", "number", "string"},
    "number": {"number", "string"},
    "string": {"string"},
}


def is_type_compatible(profile: Optional[ColumnProfile], field: Optional[FieldDescriptor]) -> bool:
    if profile is None or field is None:
        return True
    if profile.type == "empty":
        return True

    # an untyped field accepts no typed column
    allowed = _TYPE_MATRIX.get(profile.type)
    if allowed is not None and field.type not in allowed:
        return False

    if field.type == "string" and field.format:
        fmt = field.format
        if fmt in ("date-time", "date"):
            return profile.format in ("date-time", "date")
        if fmt == "email":
            return profile.format == "email"
        if fmt == "uri":
            return profile.format == "uri"
        if fmt == "uri-reference":
            return profile.format in ("uri", "uri-reference")
    return True


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def validate_value(value: Any, field: Optional[FieldDescriptor]) -> bool:
    """Enum check on string forms; blanks and enum-less fields always pass."""
    if value is None or value == "":
        return True
    if field is None or not field.enum:
        return True
    return _as_text(value) in {_as_text(e) for e in field.enum}

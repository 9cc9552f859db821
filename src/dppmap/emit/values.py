from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

_INT_RE = re.compile(r"^\s*[+-]?\d+\s*$", re.ASCII)
_NUMBER_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$", re.ASCII)


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class NumberValue:
    value: Union[int, float]


@dataclass(frozen=True)
class BoolValue:
    value: bool


CellValue = Union[StringValue, NumberValue, BoolValue]


def infer_value(raw: Any) -> Optional[CellValue]:
    """
    Light inference for a raw CSV cell.

    "true"/"false" -> BoolValue, finite numeric text -> NumberValue (int when
    the text is integral), anything else -> StringValue. None and "" give
    None: nothing should be written for them.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, (int, float)):
        return NumberValue(raw) if math.isfinite(raw) else None
    s = str(raw)
    if s == "true":
        return BoolValue(True)
    if s == "false":
        return BoolValue(False)
    if _INT_RE.match(s):
        return NumberValue(int(s))
    if _NUMBER_RE.match(s):
        num = float(s)
        if math.isfinite(num):
            return NumberValue(num)
    return StringValue(s)

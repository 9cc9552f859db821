from . import values
from . import materialize

from .values import BoolValue, CellValue, NumberValue, StringValue, infer_value
from .materialize import (
    build_context,
    compact_arrays,
    generate_documents,
    materialize_row,
    set_property,
)

__all__ = [
    "values",
    "materialize",
    "BoolValue",
    "CellValue",
    "NumberValue",
    "StringValue",
    "infer_value",
    "build_context",
    "compact_arrays",
    "generate_documents",
    "materialize_row",
    "set_property",
]

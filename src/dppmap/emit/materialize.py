from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from dppmap.errors import PathConflictError
from .values import infer_value

if TYPE_CHECKING:
    from dppmap.config import MapperConfig

log = logging.getLogger("dppmap.emit")

_BRACKET_RE = re.compile(r"\[(\d+)\]")

Sector = Union[str, Sequence[str]]


def _split_path(path: str) -> List[str]:
    # "items[2].name" -> ["items", "2", "name"]
    return _BRACKET_RE.sub(r".\1", path).split(".")


def _ensure_slot(lst: List[Any], index: int) -> None:
    if index >= len(lst):
        lst.extend([None] * (index + 1 - len(lst)))


def set_property(doc: Dict[str, Any], path: str, value: Any) -> None:
    """
    Set value at a dot/bracket path, creating containers on demand.

    A key followed by an all-digit segment becomes a list, any other key a
    dict. Empty strings and None are never written.

    Examples:
      set_property(doc, "manufacturer.name", "ACME")
      set_property(doc, "refDocs[1].title", "Manual")   # refDocs -> [None, {...}]
    """
    if value == "" or value is None:
        return

    keys = _split_path(path)
    cur: Any = doc
    for i, key in enumerate(keys):
        is_last = i == len(keys) - 1
        if isinstance(cur, list):
            if not key.isdigit():
                raise PathConflictError(f"{path}: expected an index at '{key}'")
            slot: Any = int(key)
            _ensure_slot(cur, slot)
        elif isinstance(cur, dict):
            slot = key
        else:
            raise PathConflictError(f"{path}: cannot descend into a value at '{key}'")

        if is_last:
            cur[slot] = value
            return

        nxt = cur[slot] if isinstance(cur, list) else cur.get(slot)
        if nxt is None:
            nxt = [] if keys[i + 1].isdigit() else {}
            cur[slot] = nxt
        cur = nxt


def compact_arrays(obj: Any) -> Any:
    """Drop None holes from every list, recursively. Dicts are updated in place."""
    if isinstance(obj, list):
        return [compact_arrays(item) for item in obj if item is not None]
    if isinstance(obj, dict):
        for key in list(obj):
            obj[key] = compact_arrays(obj[key])
    return obj


# ============================================================================
# Rows -> documents
# ============================================================================

def build_context(sector: Sector, context_base: Optional[str] = None) -> List[str]:
    """Core context first, then one per sector, without repeats."""
    if context_base is None:
        from dppmap.config import DEFAULT_CONTEXT_BASE

        context_base = DEFAULT_CONTEXT_BASE
    sectors = [sector] if isinstance(sector, str) else list(sector)
    contexts = [f"{context_base}dpp-core.context.jsonld"]
    for s in sectors:
        url = f"{context_base}dpp-{s}.context.jsonld"
        if url not in contexts:
            contexts.append(url)
    return contexts


def materialize_row(
    mapping: Mapping[str, Optional[str]],
    row: Mapping[str, Any],
    context: Optional[List[str]] = None,
) -> Dict[str, Any]:
    doc: Dict[str, Any] = {}
    if context is not None:
        doc["@context"] = list(context)

    for header, path in mapping.items():
        if not path or not path.strip():
            continue
        if header not in row:
            continue
        cell = infer_value(row[header])
        if cell is None:
            continue
        set_property(doc, path, cell.value)

    return compact_arrays(doc)


def generate_documents(
    rows: Sequence[Mapping[str, Any]],
    mapping: Mapping[str, Optional[str]],
    sector: Sector,
    config: Optional["MapperConfig"] = None,
) -> List[Dict[str, Any]]:
    """One nested document per row, each carrying the sector @context."""
    if not rows or not mapping or not sector:
        return []
    context = build_context(sector, config.context_base if config is not None else None)
    docs = [materialize_row(mapping, row, context) for row in rows]
    log.debug("materialized %d document(s) from %d mapped header(s)", len(docs), len(mapping))
    return docs

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from dppmap.schema.types import FieldDescriptor

_INDEX_RE = re.compile(r"\[\d+\]")
_TRAILING_INDEX_RE = re.compile(r"^(.*)\[(\d+)\]$")


def _instances(mapped: Iterable[str]) -> Dict[str, Set[str]]:
    """
    Schema path -> concrete object paths the mapping writes into.

    "items[0].meta.name" gives items -> {items[0]} and
    items.meta -> {items[0].meta}.
    """
    out: Dict[str, Set[str]] = {}
    for path in mapped:
        parts = path.split(".")
        for i in range(1, len(parts)):
            concrete = ".".join(parts[:i])
            out.setdefault(_INDEX_RE.sub("", concrete), set()).add(concrete)
    return out


def _expand_min_items(instances: Dict[str, Set[str]], arrays: Iterable[FieldDescriptor]) -> None:
    # an array under construction needs items 0..minItems-1; unindexed use counts as item 0
    for arr in arrays:
        used_items = instances.get(arr.path)
        if not used_items:
            continue
        by_base: Dict[str, Set[int]] = {}
        for concrete in used_items:
            m = _TRAILING_INDEX_RE.match(concrete)
            base, idx = (m.group(1), int(m.group(2))) if m else (concrete, 0)
            by_base.setdefault(base, set()).add(idx)
        for base, used in by_base.items():
            for i in range(arr.min_items):
                if i not in used:
                    used_items.add(f"{base}[{i}]")


def _is_satisfied(concrete: str, mapped: List[str]) -> bool:
    return any(
        m == concrete or m.startswith(concrete + ".") or m.startswith(concrete + "[")
        for m in mapped
    )


def get_missing_required_fields(
    mapping: Mapping[str, Optional[str]],
    fields: Union[Mapping[str, FieldDescriptor], Iterable[FieldDescriptor]],
) -> List[str]:
    """
    Concrete paths a mapping must still fill to produce complete documents.

    Required root fields are always checked. A required nested field is
    checked only inside objects (or array items) the mapping already writes
    into, and an array with `minItems` that is being built needs that many
    items. Fields tagged with oneOf branches count only while a mapped path
    uses the same branch.

    `fields` should come from flatten_schema(..., include_containers=True)
    so that required objects and arrays, and their minItems, are known.
    Returns sorted, unique paths; indices appear where the mapping used them.
    """
    if not fields:
        return []
    if isinstance(fields, Mapping):
        fields = fields.values()
    fields = list(fields)
    by_path = {f.path: f for f in fields}

    mapped = [p for p in (mapping or {}).values() if p]
    instances = _instances(mapped)
    _expand_min_items(instances, [f for f in fields if f.min_items])

    branches_in_use: Set[Tuple[str, int]] = set()
    for path in mapped:
        f = by_path.get(_INDEX_RE.sub("", path))
        if f is not None:
            branches_in_use.update((m.group_id, m.branch_index) for m in f.one_of)

    missing: Set[str] = set()
    for f in fields:
        if not f.required:
            continue
        if f.one_of and not any((m.group_id, m.branch_index) in branches_in_use for m in f.one_of):
            continue
        if not f.parent:
            if not _is_satisfied(f.path, mapped):
                missing.add(f.path)
            continue
        for owner in instances.get(f.parent, ()):
            concrete = f"{owner}.{f.leaf}"
            if not _is_satisfied(concrete, mapped):
                missing.add(concrete)
    return sorted(missing)

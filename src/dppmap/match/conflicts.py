from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from dppmap.schema.types import FieldDescriptor

ConflictGroup = Tuple[str, ...]

_INDEX_RE = re.compile(r"\[\d+\]")


def _scope_key(path: str, owner: str) -> str:
    """
    The object instance a oneOf applies to: "items[1]" for
    "items[1].fieldY" owned by "items", else the owner path itself.
    """
    if owner != "root" and path.startswith(owner + "["):
        m = re.match(rf"^{re.escape(owner)}\[\d+\]", path)
        if m:
            return m.group(0)
    return owner


def validate_mapping_constraints(
    mapping: Mapping[str, Optional[str]],
    fields: Union[Mapping[str, FieldDescriptor], Iterable[FieldDescriptor]],
) -> List[ConflictGroup]:
    """
    Report mapped paths that populate more than one branch of the same oneOf.

    Each array item is its own scope, so "items[0].x" and "items[1].y" never
    conflict. Paths from the same branch never conflict with each other.
    Advisory only; unknown paths are ignored.
    """
    if not mapping or not fields:
        return []
    if not isinstance(fields, Mapping):
        fields = {f.path: f for f in fields}

    mapped = [p for p in mapping.values() if p]
    if len(mapped) < 2:
        return []

    # (scope, group_id) -> ordered paths, branch indices seen
    buckets: Dict[Tuple[str, str], Tuple[List[str], Set[int]]] = {}
    for path in mapped:
        f = fields.get(_INDEX_RE.sub("", path))
        if f is None or not f.one_of:
            continue
        for m in f.one_of:
            key = (_scope_key(path, m.owner), m.group_id)
            paths, branches = buckets.setdefault(key, ([], set()))
            if path not in paths:
                paths.append(path)
            branches.add(m.branch_index)

    return [tuple(paths) for paths, branches in buckets.values() if len(branches) > 1]

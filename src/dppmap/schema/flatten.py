from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Set

from dppmap.errors import SchemaShapeError
from .types import FieldDescriptor, OneOfMembership

log = logging.getLogger("dppmap.schema")

COMBINATORS = ("allOf", "oneOf", "anyOf")
CONDITIONALS = ("if", "then", "else")
SCALAR_TYPES = {"string", "number", "integer", "boolean"}

Collected = Dict[str, FieldDescriptor]


# ============================================================================
# Public entry point
# ============================================================================

def flatten_schema(
    schema: Optional[Mapping[str, Any]],
    parent_path: str = "",
    in_array: bool = False,
    include_containers: bool = False,
) -> List[FieldDescriptor]:
    """
    Flatten a fully resolved JSON Schema into leaf field descriptors.

    Paths are dot-joined property names; array items share their parent's
    path and mark every descendant as multivalued. The result is
    deduplicated by path and sorted, so flattening the same schema twice
    yields the same list.

    With include_containers=True, every object or array property that has
    structure below it is listed too (type "object" or "array"), carrying
    its `required` flag and `minItems`. Required-field checks need these.

    `$ref` must already be resolved. A node that is neither a mapping nor a
    boolean schema raises SchemaShapeError.
    """
    if schema is None:
        return []
    collected = _flatten_node(schema, parent_path, in_array)
    fields = sorted(
        (f for f in collected.values() if include_containers or not f.is_container),
        key=lambda f: f.path,
    )
    log.debug("flattened %d field(s) under %r", len(fields), parent_path or "root")
    return fields


def field_map(fields: List[FieldDescriptor]) -> Dict[str, FieldDescriptor]:
    return {f.path: f for f in fields}


# ============================================================================
# Node variants
# ============================================================================

def _flatten_node(node: Any, parent_path: str, in_array: bool) -> Collected:
    if isinstance(node, bool):
        # `true` / `false` schemas carry no structure
        return {}
    if not isinstance(node, Mapping):
        raise SchemaShapeError(
            parent_path, f"schema node must be an object, got {type(node).__name__}"
        )

    collected: Collected = {}
    _merge_into(collected, _flatten_properties(node, parent_path, in_array))
    _merge_into(collected, _flatten_items(node, parent_path))
    _merge_into(collected, _flatten_combinators(node, parent_path, in_array))
    _merge_into(collected, _flatten_conditionals(node, parent_path, in_array))
    _mark_required(collected, parent_path, _required_keys(node, parent_path))

    if (
        not collected
        and parent_path
        and "properties" not in node
        and "items" not in node
        and ("type" in node or "enum" in node)
    ):
        leaf = _leaf(node, parent_path, in_array or _is_array_node(node))
        collected[leaf.path] = leaf
    return collected


def _flatten_properties(node: Mapping[str, Any], parent_path: str, in_array: bool) -> Collected:
    props = node.get("properties")
    if props is None:
        return {}
    if not isinstance(props, Mapping):
        raise SchemaShapeError(parent_path, "'properties' must be an object")

    out: Collected = {}
    for key, prop in props.items():
        path = f"{parent_path}.{key}" if parent_path else key
        sub = _flatten_node(prop, path, in_array)
        prop = prop if isinstance(prop, Mapping) else {}
        array_prop = _is_array_node(prop) or "items" in prop
        min_items = _min_items(prop, path) if array_prop else None

        if not sub:
            # no further structure: emit the property itself
            sub = {path: _leaf(prop, path, in_array or _is_array_node(prop))}
        elif path not in sub:
            sub[path] = FieldDescriptor(
                path=path,
                is_array=in_array or array_prop,
                type="array" if array_prop else "object",
            )
        if min_items is not None:
            sub[path] = replace(sub[path], min_items=min_items)
        _merge_into(out, sub)
    return out


def _flatten_items(node: Mapping[str, Any], parent_path: str) -> Collected:
    items = node.get("items")
    if items is None or isinstance(items, bool):
        return {}
    if isinstance(items, list):
        # tuple validation: every positional schema shares the element path
        out: Collected = {}
        for item in items:
            _merge_into(out, _flatten_items({"items": item}, parent_path))
        return out
    if not isinstance(items, Mapping):
        raise SchemaShapeError(parent_path, "'items' must be an object or a list")

    sub = _flatten_node(items, parent_path, True)
    if sub:
        return sub
    if not parent_path:
        return {}
    # array of primitives
    return {parent_path: _leaf(items, parent_path, True)}


def _flatten_combinators(node: Mapping[str, Any], parent_path: str, in_array: bool) -> Collected:
    out: Collected = {}
    for combinator in COMBINATORS:
        branches = node.get(combinator)
        if branches is None:
            continue
        if not isinstance(branches, list):
            raise SchemaShapeError(parent_path, f"'{combinator}' must be a list")

        group_id = f"{parent_path or 'root'}#oneOf" if combinator == "oneOf" else None
        for index, branch in enumerate(branches):
            sub = _flatten_node(branch, parent_path, in_array)
            if group_id is not None:
                membership = OneOfMembership(group_id=group_id, branch_index=index)
                sub = {p: f.with_membership(membership) for p, f in sub.items()}
            _merge_into(out, sub)
    return out


def _flatten_conditionals(node: Mapping[str, Any], parent_path: str, in_array: bool) -> Collected:
    out: Collected = {}
    for cond in CONDITIONALS:
        if cond in node:
            _merge_into(out, _flatten_node(node[cond], parent_path, in_array))
    return out


# ============================================================================
# Helpers
# ============================================================================

def _merge_into(dst: Collected, src: Collected) -> None:
    for path, f in src.items():
        existing = dst.get(path)
        dst[path] = f if existing is None else existing.merged_with(f)


def _is_array_node(node: Mapping[str, Any]) -> bool:
    t = node.get("type")
    if isinstance(t, list):
        return "array" in t
    return t == "array"


def _resolve_type(raw: Any) -> Optional[str]:
    """["string", "null"] -> "string"; container types carry no leaf type."""
    if isinstance(raw, list):
        non_null = [t for t in raw if t != "null"]
        raw = non_null[0] if non_null else (raw[0] if raw else None)
    return raw if raw in SCALAR_TYPES else None


def _leaf(node: Mapping[str, Any], path: str, is_array: bool) -> FieldDescriptor:
    enum = node.get("enum")
    if enum is not None and not isinstance(enum, list):
        raise SchemaShapeError(path, "'enum' must be a list")
    return FieldDescriptor(
        path=path,
        is_array=is_array,
        type=_resolve_type(node.get("type")),
        format=node.get("format"),
        enum=tuple(enum) if enum is not None else None,
    )


def _min_items(node: Mapping[str, Any], path: str) -> Optional[int]:
    raw = node.get("minItems")
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise SchemaShapeError(path, "'minItems' must be a non-negative integer")
    return raw


def _required_keys(node: Mapping[str, Any], path: str) -> Set[str]:
    """Own `required` plus any declared by allOf branches of the same object."""
    keys: Set[str] = set()
    sources = [node] + [b for b in node.get("allOf") or [] if isinstance(b, Mapping)]
    for src in sources:
        raw = src.get("required")
        if raw is None:
            continue
        if not isinstance(raw, list):
            raise SchemaShapeError(path, "'required' must be a list")
        keys.update(str(k) for k in raw)
    return keys


def _mark_required(collected: Collected, parent_path: str, keys: Set[str]) -> None:
    for key in keys:
        path = f"{parent_path}.{key}" if parent_path else key
        f = collected.get(path)
        if f is not None and not f.required:
            collected[path] = replace(f, required=True)

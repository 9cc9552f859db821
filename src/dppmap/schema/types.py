from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

CONTAINER_TYPES = ("object", "array")


@dataclass(frozen=True)
class OneOfMembership:
    group_id: str               # "<owner path or root>#oneOf"
    branch_index: int

    @property
    def owner(self) -> str:
        return self.group_id.split("#", 1)[0] or "root"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    One addressable location in a flattened schema: a leaf, or an
    object/array container when those are requested.

    Invariants:
    - path is unique within a descriptor collection
    - one_of never holds the same (group_id, branch_index) twice
    - treated as immutable once flattening returns
    - container descriptors (type "object" or "array") only appear when
      flattening with include_containers=True
    """

    path: str
    is_array: bool = False
    type: Optional[str] = None          # string|number|integer|boolean, or object|array for containers
    format: Optional[str] = None
    enum: Optional[Tuple[Any, ...]] = None
    one_of: Tuple[OneOfMembership, ...] = field(default_factory=tuple)
    required: bool = False              # listed in the owning object's `required`
    min_items: Optional[int] = None     # arrays only

    @property
    def root(self) -> str:
        return self.path.split(".", 1)[0]

    @property
    def parent(self) -> str:
        return self.path.rsplit(".", 1)[0] if "." in self.path else ""

    @property
    def is_container(self) -> bool:
        return self.type in CONTAINER_TYPES

    @property
    def leaf(self) -> str:
        return self.path.rsplit(".", 1)[-1]

    def with_membership(self, membership: OneOfMembership) -> "FieldDescriptor":
        if membership in self.one_of:
            return self
        return replace(self, one_of=self.one_of + (membership,))

    def merged_with(self, later: "FieldDescriptor") -> "FieldDescriptor":
        """Later-visited scalars win unless absent; memberships accumulate."""
        merged = FieldDescriptor(
            path=self.path,
            is_array=self.is_array or later.is_array,
            type=later.type if later.type is not None else self.type,
            format=later.format if later.format is not None else self.format,
            enum=later.enum if later.enum is not None else self.enum,
            one_of=self.one_of,
            required=self.required or later.required,
            min_items=later.min_items if later.min_items is not None else self.min_items,
        )
        for m in later.one_of:
            merged = merged.with_membership(m)
        return merged

    def to_dict(self) -> dict:
        d: dict = {"path": self.path, "isArray": self.is_array}
        if self.type is not None:
            d["type"] = self.type
        if self.format is not None:
            d["format"] = self.format
        if self.enum is not None:
            d["enum"] = list(self.enum)
        if self.required:
            d["required"] = True
        if self.min_items is not None:
            d["minItems"] = self.min_items
        if self.one_of:
            d["oneOf"] = [
                {"groupId": m.group_id, "index": m.branch_index} for m in self.one_of
            ]
        return d

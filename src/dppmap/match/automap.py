from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from dppmap.schema.types import FieldDescriptor
from .score import compute_match_score

if TYPE_CHECKING:
    from dppmap.config import MapperConfig

log = logging.getLogger("dppmap.match")

FieldLike = Union[str, FieldDescriptor]

_DIGITS_RE = re.compile(r"(\d+)")


@dataclass(frozen=True)
class MatchCandidate:
    header: str
    field: FieldDescriptor
    score: float


@dataclass(frozen=True)
class IndexedSuggestion:
    value: str
    kind: str                   # existing | new | scalar
    index: int


def _as_fields(fields: Iterable[FieldLike]) -> List[FieldDescriptor]:
    out = []
    for f in fields:
        if isinstance(f, FieldDescriptor):
            out.append(f)
        elif isinstance(f, str):
            out.append(FieldDescriptor(path=f))
        else:
            raise TypeError(f"Unsupported field type: {type(f).__name__}")
    return out


# ============================================================================
# Mapping session
# ============================================================================

@dataclass
class MappingSession:
    """
    Scores and assigns headers for one import.

    Holds the config and a score cache keyed by (header, path). The cache
    lives only as long as the session; nothing is shared between sessions.
    """

    config: Optional["MapperConfig"] = None
    _scores: Dict[Tuple[str, str], float] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if self.config is None:
            from dppmap.config import MapperConfig

            self.config = MapperConfig()

    def score(self, header: str, path: str) -> float:
        key = (header, path)
        if key not in self._scores:
            self._scores[key] = compute_match_score(header, path, self.config.synonyms)
        return self._scores[key]

    def candidates(self, headers: Sequence[str], fields: Iterable[FieldLike]) -> List[MatchCandidate]:
        """All (header, field) pairs under the cutoff, best first, stable on ties."""
        fields = _as_fields(fields)
        cands = []
        for header in headers:
            for f in fields:
                s = self.score(header, f.path)
                if s < self.config.hopeless_cutoff:
                    cands.append(MatchCandidate(header=header, field=f, score=s))
        cands.sort(key=lambda c: c.score)
        return cands

    def auto_map(self, headers: Sequence[str], fields: Iterable[FieldLike]) -> Dict[str, str]:
        if not headers or not fields:
            return {}
        fields = _as_fields(fields)
        cands = self.candidates(headers, fields)
        log.debug("%d candidate(s) for %d header(s) x %d field(s)", len(cands), len(headers), len(fields))

        # Greedy approximation of a minimum-cost bipartite matching: commit the
        # best remaining pair, never backtrack. Not guaranteed optimal.
        mapping: Dict[str, str] = {}
        used_fields: Set[str] = set()
        for c in cands:
            if c.header in mapping:
                continue
            if not c.field.is_array and c.field.path in used_fields:
                continue
            mapping[c.header] = c.field.path
            used_fields.add(c.field.path)
            log.debug("assign %r -> %s (%.2f)", c.header, c.field.path, c.score)

        return resolve_array_indices(mapping, fields)

    def best_match(self, header: str, fields: Iterable[FieldLike]) -> Optional[str]:
        best_path = None
        best_score = math.inf
        for f in _as_fields(fields):
            s = self.score(header, f.path)
            if s < best_score:
                best_score = s
                best_path = f.path
        return best_path


def generate_auto_mapping(
    headers: Sequence[str],
    fields: Iterable[FieldLike],
    config: Optional["MapperConfig"] = None,
) -> Dict[str, str]:
    """
    Map CSV headers onto schema paths.

    Every pair is scored, pairs under the cutoff are assigned greedily best
    first (a header once, a non-array path once), then array paths get
    concrete indices. Headers without a viable candidate are left out.
    """
    if not headers or not fields:
        return {}
    return MappingSession(config=config).auto_map(headers, fields)


def find_best_match(header: str, fields: Iterable[FieldLike]) -> Optional[str]:
    """Local best path for a single header; ignores other headers."""
    if not header or not fields:
        return None
    return MappingSession().best_match(header, fields)


# ============================================================================
# Array index resolution
# ============================================================================

def _with_root_index(path: str, root: str, index: int) -> str:
    parts = path.split(".")
    parts[0] = f"{root}[{index}]"
    return ".".join(parts)


def resolve_array_indices(mapping: Dict[str, str], fields: Iterable[FieldLike]) -> Dict[str, str]:
    """
    Rewrite array-field paths as `root[i].rest`.

    Headers carrying a number ("Doc 2 Title") are grouped by that number,
    numbers sorted ascending and renumbered from 0. Headers without one
    continue the running index in sorted order, opening a new item whenever
    a path repeats inside the current item.
    """
    is_array = {f.path: f.is_array for f in _as_fields(fields)}
    out = dict(mapping)

    roots: Dict[str, List[str]] = {}
    for header, path in mapping.items():
        if is_array.get(path):
            roots.setdefault(path.split(".", 1)[0], []).append(header)

    for root, headers in roots.items():
        numbered: Dict[int, List[str]] = {}
        unnumbered: List[str] = []
        for h in headers:
            m = _DIGITS_RE.search(h)
            if m:
                numbered.setdefault(int(m.group(1)), []).append(h)
            else:
                unnumbered.append(h)

        index = 0
        for item_id in sorted(numbered):
            for h in numbered[item_id]:
                out[h] = _with_root_index(mapping[h], root, index)
            index += 1

        seen: Set[str] = set()
        for h in sorted(unnumbered):
            path = mapping[h]
            if path in seen:
                index += 1
                seen.clear()
            seen.add(path)
            out[h] = _with_root_index(path, root, index)

        log.debug("array root %s: %d numbered id(s), %d unnumbered header(s)",
                  root, len(numbered), len(unnumbered))
    return out


def find_used_indices(mapping: Dict[str, Optional[str]], array_root: str) -> Set[int]:
    indices: Set[int] = set()
    if not mapping or not array_root:
        return indices
    pattern = re.compile(rf"^{re.escape(array_root)}\[(\d+)\]")
    for path in mapping.values():
        if not path:
            continue
        m = pattern.match(path)
        if m:
            indices.add(int(m.group(1)))
    return indices


def generate_indexed_suggestions(field: FieldDescriptor, used_indices: Iterable[int]) -> List[IndexedSuggestion]:
    """
    Concrete paths for attaching a header to an array field: one per item
    already in use, plus one that opens the next item.
    """
    if not field.is_array:
        return [IndexedSuggestion(value=field.path, kind="scalar", index=-1)]

    root, _, rest = field.path.partition(".")
    suffix = f".{rest}" if rest else ""
    used = sorted(set(used_indices))
    suggestions = [
        IndexedSuggestion(value=f"{root}[{i}]{suffix}", kind="existing", index=i)
        for i in used
    ]
    next_index = used[-1] + 1 if used else 0
    suggestions.append(IndexedSuggestion(value=f"{root}[{next_index}]{suffix}", kind="new", index=next_index))
    return suggestions

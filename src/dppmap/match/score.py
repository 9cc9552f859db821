from __future__ import annotations

import math
import re
from typing import Dict, Mapping, Optional, Set

from rapidfuzz.distance import Levenshtein

# Common industry column names -> schema paths. Keys are lowercase.
SYNONYM_MAP: Dict[str, str] = {
    "ean": "identifiers.gtin",
    "gtin": "identifiers.gtin",
    "brand": "tradeName",
    "manufacturer": "manufacturer.name",
    "expiry": "lifespan.manufactureDate",
    "weight": "physicalDimensions.weight",
    "width": "physicalDimensions.width",
    "height": "physicalDimensions.height",
    "depth": "physicalDimensions.depth",
    "length": "physicalDimensions.length",
}

# Tier scores; strict ordering keeps literal matches ahead of heuristic ones.
EXACT_SCORE = 0.0
SYNONYM_SCORE = 0.05
LEAF_SCORE = 0.1
EDIT_BASE = 1.0
TOKEN_BASE = 0.2
TOKEN_WEIGHT = 5.0
MIN_JACCARD = 0.4

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_CAMEL_RE = re.compile(r"([a-z])([A-Z])")
_TOKEN_SPLIT_RE = re.compile(r"[.\s_-]+")
_UPPER_SPLIT_RE = re.compile(r"(?=[A-Z])")
_HAS_UPPER_RE = re.compile(r"[A-Z]")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def normalize(text: str) -> str:
    """'Recycled %' -> 'recycledpercentage'"""
    return _NON_ALNUM_RE.sub("", text.replace("%", "Percentage").lower())


def tokenize(text: str) -> Set[str]:
    if not text:
        return set()
    spaced = _CAMEL_RE.sub(r"\1 \2", text.replace("%", "Percentage"))
    tokens = set()
    for part in _TOKEN_SPLIT_RE.split(spaced):
        clean = _NON_ALNUM_RE.sub("", part.lower())
        if clean:
            tokens.add(clean)
    return tokens


def acronym(text: str) -> str:
    """First letter of each word, or of each camel-case run if no spaces."""
    if not text:
        return ""
    parts = text.split(" ") if " " in text else _UPPER_SPLIT_RE.split(text)
    return "".join(p[:1].lower() for p in parts)


def path_acronym(path: str) -> str:
    """Short lowercase segments pass through; longer ones collapse to initials."""
    if not path:
        return ""
    out = []
    for segment in path.split("."):
        if len(segment) < 4 and not _HAS_UPPER_RE.search(segment):
            out.append(segment)
        else:
            out.append(acronym(segment))
    return "".join(out)


def levenshtein(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def fuzzy_threshold(length: int) -> int:
    if length <= 4:
        return 0
    if length <= 8:
        return 1
    return 3


def acronym_threshold(length: int) -> int:
    return 0 if length < 4 else min(2, length // 3)


def jaccard(a: Set[str], b: Set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def compute_match_score(
    header: str,
    field_path: str,
    synonyms: Optional[Mapping[str, str]] = None,
) -> float:
    """
    Score one CSV header against one dot-notation schema path.

    Lower is better: 0.0 is an exact match, math.inf means no tier
    accepted the pair. Tiers, best first:

      exact path       0.0
      synonym table    0.05
      exact leaf       0.1
      edit distance    1.0 + distance   (leaf or full path)
      acronym          1.0 + distance
      token overlap    0.2 + (1 - jaccard) * 5
    """
    if not header or not field_path:
        return math.inf
    synonyms = SYNONYM_MAP if synonyms is None else synonyms

    norm_header = normalize(header)
    norm_path = normalize(field_path)
    leaf = field_path.rsplit(".", 1)[-1]
    norm_leaf = normalize(leaf)

    if norm_header == norm_path:
        return EXACT_SCORE

    for term, target in synonyms.items():
        if target == field_path and normalize(term) == norm_header:
            return SYNONYM_SCORE

    if norm_leaf == norm_header:
        return LEAF_SCORE

    best = math.inf

    # edit distance against leaf and full path
    dist = min(levenshtein(norm_header, norm_leaf), levenshtein(norm_header, norm_path))
    if dist <= fuzzy_threshold(len(norm_header)):
        best = min(best, EDIT_BASE + dist)

    # acronyms; the acronym-vs-acronym check needs >= 3 header initials so a
    # single initial ("Category" -> "c") cannot collide with "color"
    header_acr = acronym(header)
    norm_path_acr = normalize(path_acronym(field_path))
    acr_dist = levenshtein(norm_header, norm_path_acr)
    if len(header_acr) >= 3:
        acr_dist = min(acr_dist, levenshtein(normalize(header_acr), norm_path_acr))
    if acr_dist <= acronym_threshold(len(norm_path_acr)):
        best = min(best, EDIT_BASE + acr_dist)

    # token overlap
    j = jaccard(tokenize(field_path), tokenize(header))
    if j >= MIN_JACCARD:
        best = min(best, TOKEN_BASE + (1 - j) * TOKEN_WEIGHT)

    return best

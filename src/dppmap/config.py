from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dppmap.errors import ConfigError
from dppmap.match.score import SYNONYM_MAP

DEFAULT_CONTEXT_BASE = "https://dpp-keystone.org/spec/contexts/v1/"
DEFAULT_CUTOFF = 5.0

# ---------------------------------------------------------------------------
# Mapper profiles (optional presets)
# ---------------------------------------------------------------------------

MAPPER_PROFILES: Dict[str, Dict[str, Any]] = {
    "default": {"hopeless_cutoff": DEFAULT_CUTOFF},
    # literal, synonym, leaf and single-edit matches only
    "strict": {"hopeless_cutoff": 1.5},
    "lenient": {"hopeless_cutoff": DEFAULT_CUTOFF},
}

_KNOWN_KEYS = {"profile", "hopeless_cutoff", "synonyms", "context_base"}


@dataclass
class MapperConfig:
    """
    Tunables for auto-mapping and document generation.

    Fields:
      hopeless_cutoff: candidates scoring at or above this are dropped
      synonyms: header term -> schema path, merged over SYNONYM_MAP
      context_base: URL prefix for generated @context entries
    """

    hopeless_cutoff: float = DEFAULT_CUTOFF
    synonyms: Dict[str, str] = field(default_factory=lambda: dict(SYNONYM_MAP))
    context_base: str = DEFAULT_CONTEXT_BASE

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_config(cls, cfg: Dict[str, Any] | None) -> "MapperConfig":
        """
        Build from a config mapping:

        profile: strict
        hopeless_cutoff: 2.0
        synonyms:
          sku: identifiers.gtin
        context_base: https://example.org/contexts/
        """
        if cfg is None:
            return cls()
        if not isinstance(cfg, dict):
            raise ConfigError(f"config must be a mapping, got {type(cfg).__name__}")

        unknown = set(cfg) - _KNOWN_KEYS
        if unknown:
            raise ConfigError(f"unknown config key(s): {sorted(unknown)}")

        cfg = dict(cfg)
        profile_name = cfg.pop("profile", None)
        if profile_name is not None and profile_name not in MAPPER_PROFILES:
            raise ConfigError(
                f"unknown profile '{profile_name}'; choose one of {list(MAPPER_PROFILES)}"
            )
        profile_data = MAPPER_PROFILES.get(profile_name, {}) if profile_name else {}
        merged = {**profile_data, **cfg}

        try:
            cutoff = float(merged.get("hopeless_cutoff", DEFAULT_CUTOFF))
        except (TypeError, ValueError) as e:
            raise ConfigError("hopeless_cutoff must be a number") from e

        extra = merged.get("synonyms") or {}
        if not isinstance(extra, dict):
            raise ConfigError("synonyms must be a mapping of term -> path")
        synonyms = dict(SYNONYM_MAP)
        synonyms.update({str(k).lower(): str(v) for k, v in extra.items()})

        context_base = str(merged.get("context_base", DEFAULT_CONTEXT_BASE))
        if not context_base.endswith("/"):
            context_base += "/"

        return cls(
            hopeless_cutoff=cutoff,
            synonyms=synonyms,
            context_base=context_base,
        )


def load_config(path: Optional[Path]) -> MapperConfig:
    if path is None:
        return MapperConfig()
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML") from e
    return MapperConfig.from_config(data)

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import yaml
from pydantic import ValidationError

from dppmap.errors import DppMapError, MappingFileError
from dppmap.models import MappingFile


def read_csv_rows(csv_path) -> Tuple[List[str], List[Dict[str, str]]]:
    """Header list (file order) and row dicts; a UTF-8 BOM is dropped."""
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        headers = list(reader.fieldnames or [])
        rows = [dict(row) for row in reader]
    return headers, rows


def load_schema(path) -> Dict[str, Any]:
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise FileNotFoundError(path)
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DppMapError(f"{path}: invalid JSON") from e
    if not isinstance(schema, dict):
        raise DppMapError(f"{path}: schema root must be an object")
    return schema


def jsonl_write(path, records: Iterable[Dict[str, Any]]) -> int:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with p.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
            n += 1
    return n


# ---------------------------------------------------------------------------
# Mapping files
# ---------------------------------------------------------------------------

def save_mapping_file(path, mf: MappingFile) -> None:
    p = Path(path).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(mf.model_dump(), f, sort_keys=False, allow_unicode=True)


def load_mapping_file(path) -> MappingFile:
    """
    Load a mapping file written by `dppmap map --out`.

    A bare {header: path} YAML/JSON mapping is accepted too; null paths
    mark headers left unmapped.
    """
    p = Path(path).expanduser().resolve()
    if not p.is_file():
        raise MappingFileError(f"mapping file not found: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise MappingFileError(f"{p}: invalid YAML") from e

    if not isinstance(data, dict):
        raise MappingFileError(f"{p}: expected a mapping at top level")
    if "mapping" not in data and all(v is None or isinstance(v, str) for v in data.values()):
        data = {"mapping": data}

    try:
        return MappingFile.model_validate(data)
    except ValidationError as e:
        raise MappingFileError(f"{p}: {e}") from e

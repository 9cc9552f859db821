from __future__ import annotations

import json
from pathlib import Path
from typing import List, NoReturn, Optional

import pandas as pd
import typer

from dppmap.config import load_config
from dppmap.emit.materialize import generate_documents
from dppmap.errors import DppMapError
from dppmap.io import (
    jsonl_write,
    load_mapping_file,
    load_schema,
    read_csv_rows,
    save_mapping_file,
)
from dppmap.log import get_logger
from dppmap.match.automap import MappingSession
from dppmap.match.conflicts import validate_mapping_constraints
from dppmap.match.profile import analyze_column_data
from dppmap.match.required import get_missing_required_fields
from dppmap.models import FieldRecord, MappingFile
from dppmap.schema.flatten import flatten_schema

app = typer.Typer(help="dppmap CLI: CSV columns -> schema paths -> nested documents")


def _abort(msg: str) -> NoReturn:
    typer.secho(msg, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    get_logger(verbose)


# ---- schema ----

@app.command("fields")
def fields_cmd(
    schema_path: Path = typer.Argument(..., help="Resolved JSON Schema file"),
    as_json: bool = typer.Option(False, "--json", help="Print full descriptors as JSON"),
    containers: bool = typer.Option(False, "--containers", help="Also list object/array properties"),
):
    """List the flattened field paths of a schema."""
    try:
        fields = flatten_schema(load_schema(schema_path), include_containers=containers)
    except (DppMapError, FileNotFoundError) as e:
        _abort(str(e))

    if as_json:
        recs = [FieldRecord(**f.to_dict()).model_dump(exclude_none=True) for f in fields]
        typer.echo(json.dumps(recs, indent=2))
        return
    for f in fields:
        marker = "[]" if f.is_array else ""
        req = "\trequired" if f.required else ""
        typer.echo(f"{f.path}{marker}\t{f.type or ''}{req}")


# ---- mapping ----

@app.command("map")
def map_cmd(
    schema_path: Path = typer.Argument(..., help="Resolved JSON Schema file"),
    csv_path: Path = typer.Argument(..., help="CSV file whose header row is mapped"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write mapping YAML here"),
    sector: List[str] = typer.Option(None, "--sector", "-s", help="Sector id stored in the mapping file (repeatable)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Mapper config YAML"),
):
    """Auto-map CSV headers onto schema paths; report oneOf conflicts and missing required fields."""
    try:
        cfg = load_config(config)
        all_fields = flatten_schema(load_schema(schema_path), include_containers=True)
        headers, _ = read_csv_rows(csv_path)
    except (DppMapError, FileNotFoundError) as e:
        _abort(str(e))

    fields = [f for f in all_fields if not f.is_container]
    session = MappingSession(config=cfg)
    mapping = session.auto_map(headers, fields)
    conflicts = validate_mapping_constraints(mapping, fields)
    missing = get_missing_required_fields(mapping, all_fields)
    unmatched = [h for h in headers if h not in mapping]
    typer.echo(f"Mapped {len(mapping)}/{len(headers)} header(s) onto {len(fields)} field(s)")

    for h in headers:
        if h in mapping:
            typer.echo(f"{h} -> {mapping[h]}")
        else:
            typer.secho(f"{h} -> (unmatched)", fg=typer.colors.YELLOW)
    for group in conflicts:
        typer.secho(f"oneOf conflict: {', '.join(group)}", fg=typer.colors.YELLOW)
    for path in missing:
        typer.secho(f"missing required: {path}", fg=typer.colors.YELLOW)

    if out is not None:
        mf = MappingFile(
            sector=list(sector or []),
            mapping=mapping,
            conflicts=[list(g) for g in conflicts],
            unmatched=unmatched,
            missing_required=missing,
        )
        save_mapping_file(out, mf)
        typer.secho(f"Wrote {out}", fg=typer.colors.GREEN)


@app.command("candidates")
def candidates_cmd(
    schema_path: Path = typer.Argument(..., help="Resolved JSON Schema file"),
    csv_path: Path = typer.Argument(..., help="CSV file whose header row is scored"),
    out_csv: Path = typer.Option(Path("candidates.csv"), "--out", "-o", help="Output CSV"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Mapper config YAML"),
):
    """Export every scored (header, path) candidate under the cutoff for review."""
    try:
        cfg = load_config(config)
        fields = flatten_schema(load_schema(schema_path))
        headers, _ = read_csv_rows(csv_path)
    except (DppMapError, FileNotFoundError) as e:
        _abort(str(e))

    cands = MappingSession(config=cfg).candidates(headers, fields)
    df = pd.DataFrame(
        [
            {"header": c.header, "path": c.field.path, "score": round(c.score, 4), "is_array": c.field.is_array}
            for c in cands
        ],
        columns=["header", "path", "score", "is_array"],
    )
    out_csv = out_csv.expanduser().resolve()
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_csv, index=False)
    typer.secho(f"Wrote {out_csv} ({len(df)} rows)", fg=typer.colors.GREEN)


@app.command("profile")
def profile_cmd(csv_path: Path = typer.Argument(..., help="CSV file to profile")):
    """Print the inferred type (and format) of each column."""
    try:
        headers, rows = read_csv_rows(csv_path)
    except FileNotFoundError as e:
        _abort(str(e))
    for h in headers:
        p = analyze_column_data(rows, h)
        suffix = f" ({p.format})" if p.format else ""
        typer.echo(f"{h}: {p.type}{suffix}")


# ---- documents ----

@app.command("generate")
def generate_cmd(
    csv_path: Path = typer.Argument(..., help="CSV file with data rows"),
    mapping_path: Path = typer.Argument(..., help="Mapping YAML from `dppmap map --out`"),
    sector: List[str] = typer.Option(None, "--sector", "-s", help="Sector id for @context (repeatable)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write JSONL here instead of stdout"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Mapper config YAML"),
):
    """Materialize each CSV row into a nested JSON document."""
    try:
        cfg = load_config(config)
        mf = load_mapping_file(mapping_path)
        _, rows = read_csv_rows(csv_path)
        sectors = list(sector or []) or mf.sector
        if not sectors:
            raise typer.BadParameter("No sector given. Pass --sector or store one in the mapping file.")
        mapping = {h: p for h, p in mf.mapping.items() if p}
        docs = generate_documents(rows, mapping, sectors, config=cfg)
    except (DppMapError, FileNotFoundError) as e:
        _abort(str(e))

    if mf.conflicts:
        typer.secho(f"mapping has {len(mf.conflicts)} oneOf conflict(s)", fg=typer.colors.YELLOW)

    if out is None:
        typer.echo(json.dumps(docs, indent=2, ensure_ascii=False))
        return
    n = jsonl_write(out, docs)
    typer.secho(f"Wrote {n} document(s) to {out}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()

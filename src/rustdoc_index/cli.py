"""Command line interface for inspecting rustdoc search indexes."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Annotated

import typer

from rustdoc_index.errors import ErrorCode, MalformedIndexError, RustdocIndexError, SettingsError
from rustdoc_index.kinds import ItemKind
from rustdoc_index.loader import parse
from rustdoc_index.logging import get_logger, setup_logging
from rustdoc_index.models import Item, SymbolTable
from rustdoc_index.problem_details import render_problem
from rustdoc_index.serializer import dumps, render_js
from rustdoc_index.settings import IndexSettings, load_settings
from rustdoc_index.signatures import decode_signature, render_signature

__all__ = ["app", "main"]

logger = get_logger(__name__)

app = typer.Typer(
    help="Inspect, search and convert rustdoc search-index.js files.",
    no_args_is_help=True,
    add_completion=False,
)

_IndexPathArg = Annotated[
    Path,
    typer.Argument(..., help="Path to search-index.js or its JSON payload", show_default=False),
]


def _fail(error: RustdocIndexError, *, instance: str) -> typer.Exit:
    typer.echo(render_problem(error.to_problem_details(instance=instance)), err=True)
    return typer.Exit(code=1)


def _settings() -> IndexSettings:
    try:
        settings = load_settings()
    except SettingsError as exc:
        raise _fail(exc, instance="urn:rustdoc-index:settings") from exc
    setup_logging(settings.log_level)
    return settings


def _load_table(path: Path, settings: IndexSettings) -> SymbolTable:
    try:
        payload = path.read_bytes()
    except OSError as exc:
        error = RustdocIndexError(
            f"cannot read {path}: {exc.strerror or exc}",
            code=ErrorCode.FILE_OPERATION_ERROR,
            http_status=404,
            cause=exc,
            context={"path": str(path)},
        )
        raise _fail(error, instance=f"urn:rustdoc-index:file:{path.name}") from exc
    try:
        return parse(payload, reference_base=settings.reference_base)
    except MalformedIndexError as exc:
        raise _fail(exc, instance=f"urn:rustdoc-index:parse:{path.name}") from exc


def _parse_kinds(kinds: Iterable[str]) -> list[ItemKind]:
    parsed: list[ItemKind] = []
    for kind in kinds:
        try:
            parsed.append(ItemKind.from_label(kind))
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--kind") from exc
    return parsed


def _item_line(table: SymbolTable, crate_name: str, item: Item) -> str:
    crate = table[crate_name]
    record = item.to_record()
    record["crate"] = crate_name
    signature = decode_signature(item.signature, crate.types, base=crate.reference_base)
    if signature is not None:
        record["signature"] = render_signature(signature)
    return json.dumps(record, ensure_ascii=False)


@app.command()
def summary(path: _IndexPathArg) -> None:
    """Print per-crate item counts and kind histograms as JSON."""
    settings = _settings()
    table = _load_table(path, settings)
    report = {
        "crates": {
            name: {
                "doc": crate.doc,
                "items": len(crate),
                "types": len(crate.types),
                "reference_base": crate.reference_base,
                "kinds": crate.kind_counts(),
            }
            for name, crate in table.items()
        },
        "items": table.item_count,
    }
    typer.echo(json.dumps(report, ensure_ascii=False, sort_keys=True))


@app.command()
def items(
    path: _IndexPathArg,
    crate: Annotated[
        str | None, typer.Option("--crate", "-c", help="Only list items of this crate")
    ] = None,
    kind: Annotated[
        list[str] | None,
        typer.Option("--kind", "-k", help="Only list items of this kind (repeatable)"),
    ] = None,
) -> None:
    """Print every item as one JSON object per line."""
    settings = _settings()
    table = _load_table(path, settings)
    if crate is not None and crate not in table:
        raise typer.BadParameter(f"no crate named {crate!r}", param_hint="--crate")
    allowed = {int(value) for value in _parse_kinds(kind or [])}
    for crate_name, crate_record in table.items():
        if crate is not None and crate_name != crate:
            continue
        for item in crate_record:
            if allowed and int(item.kind) not in allowed:
                continue
            typer.echo(_item_line(table, crate_name, item))


@app.command()
def search(
    path: _IndexPathArg,
    query: Annotated[str, typer.Argument(help="Name or path fragment to look for")],
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", min=1, help="Maximum number of hits")
    ] = None,
    kind: Annotated[
        list[str] | None,
        typer.Option("--kind", "-k", help="Only return items of this kind (repeatable)"),
    ] = None,
) -> None:
    """Print items matching QUERY, best matches first, as JSON lines."""
    settings = _settings()
    table = _load_table(path, settings)
    kinds = _parse_kinds(kind) if kind else None
    hits = table.search(query, limit=limit or settings.search_limit, kinds=kinds)
    for item in hits:
        typer.echo(_item_line(table, table.crate_of(item).name, item))
    logger.info(
        "Search finished",
        extra={"operation": "search", "query": query, "hits": len(hits)},
    )


@app.command()
def convert(
    path: _IndexPathArg,
    output_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: json or js")
    ] = "json",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to this file instead of stdout")
    ] = None,
) -> None:
    """Re-serialise the index as JSON or as a search-index.js file."""
    settings = _settings()
    table = _load_table(path, settings)
    if output_format == "json":
        text = dumps(table) + "\n"
    elif output_format == "js":
        text = render_js(table, export_name=settings.export_name)
    else:
        raise typer.BadParameter("expected 'json' or 'js'", param_hint="--format")
    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_text(text, encoding="utf-8")
    logger.info(
        "Index written",
        extra={"operation": "convert", "path": str(output), "format": output_format},
    )


def main() -> None:
    """Console-script entry point."""
    app()

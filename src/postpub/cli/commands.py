"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from postpub.config import Settings, load_config
from postpub.core.export import write_index
from postpub.core.models import FileResult
from postpub.core.parse import read_sources
from postpub.core.pipeline import run_build, run_parse
from postpub.crud.database import init_db, make_engine, reset_db


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _parse(path: str, settings: Settings) -> list[FileResult]:
    """Read content files under path and parse them with the configured options."""
    src = Path(path)
    if not src.exists():
        _fail(f"Path not found: {path}")
    sources = read_sources(src)
    if not sources:
        typer.echo("No content files found.")
        raise typer.Exit(1)
    try:
        return run_parse(sources, settings.sentinel, settings.strict_fences, settings.workers)
    except ValueError as e:
        _fail("Parse failed", e)


def _echo_errors(results: list[FileResult]) -> int:
    """Print every document error to stderr and return how many there were."""
    count = 0
    for result in results:
        for err in result.errors:
            where = err.path if err.segment is None else f"{err.path} [segment {err.segment}]"
            typer.echo(f"  {err.kind}: {where}: {err.message}", err=True)
            count += 1
    return count


def configure_logging(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = None,
    ):
    """Blog post ingestion and rendering pipeline."""
    settings = _settings(overrides={"log_level": log_level.upper() if log_level else None})
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


def build_cmd(
    path: Annotated[str, typer.Argument(help="Content file or directory to build")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Parallel worker processes")] = None,
    sentinel: Annotated[Optional[str], typer.Option("--sentinel", help="Document separator marker")] = None,
    strict: Annotated[Optional[bool], typer.Option("--strict-fences", help="Fail documents with unclosed fences")] = None,
    force: Annotated[bool, typer.Option("--force", help="Export unchanged documents too")] = False,
    ):
    """Parse content, update the rebuild cache, and write document JSON."""
    settings = _settings(overrides={
        "output_dir": out, "workers": workers, "sentinel": sentinel, "strict_fences": strict,
    })
    results = _parse(path, settings)

    engine = make_engine(settings.db_url)
    init_db(engine)
    output_dir = Path(settings.output_dir)
    try:
        counts, written = run_build(results, engine, output_dir, force=force)
        write_index([doc for r in results for doc in r.documents], output_dir)
    except Exception as e:
        _fail("Build failed", e)

    for slug, json_path in written:
        typer.echo(f"  {slug} -> {json_path}")
    failed = _echo_errors(results)
    typer.echo(
        f"Build complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged, "
        f"{failed} failed"
    )
    if failed:
        raise typer.Exit(1)


def check_cmd(
    path: Annotated[str, typer.Argument(help="Content file or directory to check")],
    sentinel: Annotated[Optional[str], typer.Option("--sentinel", help="Document separator marker")] = None,
    strict: Annotated[Optional[bool], typer.Option("--strict-fences", help="Fail documents with unclosed fences")] = None,
    ):
    """Parse content and report errors without writing anything."""
    settings = _settings(overrides={"sentinel": sentinel, "strict_fences": strict})
    results = _parse(path, settings)

    for result in results:
        if result.ok:
            typer.echo(f"  ok: {result.path} ({len(result.documents)} document(s))")
    failed = _echo_errors(results)
    documents = sum(len(r.documents) for r in results)
    typer.echo(f"Checked {len(results)} file(s): {documents} document(s), {failed} error(s)")
    if failed:
        raise typer.Exit(1)


def show_cmd(
    path: Annotated[str, typer.Argument(help="Content file to parse")],
    sentinel: Annotated[Optional[str], typer.Option("--sentinel", help="Document separator marker")] = None,
    ):
    """Print the parsed documents of one file as JSON."""
    settings = _settings(overrides={"sentinel": sentinel})
    src = Path(path)
    if not src.is_file():
        _fail(f"Not a file: {path}")
    results = _parse(path, settings)
    if _echo_errors(results):
        _fail(f"Could not parse {path}")
    docs = [doc.model_dump(mode="json") for r in results for doc in r.documents]
    typer.echo(json.dumps(docs, indent=2, ensure_ascii=False))


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate the rebuild cache")] = False,
    ):
    """Initialize the rebuild cache schema. Use --reset to forget previous builds."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing build records cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")

"""CLI command implementations"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError

from draftkit.cli.prompts import PromptResolver
from draftkit.config import Settings, load_config
from draftkit.core.detect import detect_format
from draftkit.core.errors import DraftError
from draftkit.core.pipeline import BatchResult, import_file, load_staged, run_export, run_import
from draftkit.core.render import blocks_to_markdown, render_blocks
from draftkit.logging_config import configure_logging


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
    except (ValueError, ValidationError) as e:
        _fail(str(e))


def _echo_import(result: BatchResult) -> None:
    """Print per-file status, warnings, and a summary line."""
    for outcome in result.outcomes:
        if outcome.ok:
            typer.echo(f"  ok: {outcome.path} -> {outcome.staged or outcome.draft.metadata.slug}")
            for warning in outcome.draft.warnings:
                typer.echo(f"    warning: {warning}")
        else:
            typer.echo(f"  failed: {outcome.path}: {outcome.error}", err=True)
    typer.echo(
        f"Import complete - "
        f"{len(result.succeeded)} imported, "
        f"{len(result.failed)} failed"
    )


def _import(paths: list[str], settings: Settings, assume_yes: bool) -> BatchResult:
    missing = [p for p in paths if not Path(p).exists()]
    if missing:
        _fail(f"Path not found: {', '.join(missing)}")
    result = run_import(paths, PromptResolver(assume_yes=assume_yes), settings)
    if not result.outcomes:
        _fail("No importable files found.")
    _echo_import(result)
    return result


def _export(settings: Settings) -> None:
    staging_dir = Path(settings.staging_dir)
    try:
        drafts = load_staged(staging_dir)
    except (OSError, ValidationError) as e:
        _fail(f"Could not read staged drafts in {staging_dir}", e)
    if not drafts:
        typer.echo(f"Nothing staged in {staging_dir}/. Run 'draftkit import <path>' first.")
        raise typer.Exit(1)

    failures = 0
    for staged, result in run_export(drafts, settings):
        if isinstance(result, Exception):
            failures += 1
            typer.echo(f"  failed: {staged.name}: {result}", err=True)
        else:
            typer.echo(f"  {result.slug} -> {result.page_path}")
    typer.echo(f"Exported {len(drafts) - failures} article(s) to {settings.output_dir}/")
    if failures:
        raise typer.Exit(1)


def main_callback(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING, ERROR")] = None,
    ):
    """Article import and export pipeline."""
    configure_logging(_settings(overrides={"log_level": log_level}).log_level)


def import_cmd(
    paths: Annotated[list[str], typer.Argument(help="Files or directories to import")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Accept PDF text without review; cancel field mapping prompts")] = False,
    ):
    """Import Markdown, JSON, and PDF sources into staged drafts."""
    settings = _settings(overrides={"staging_dir": staging})
    result = _import(paths, settings, yes)
    if result.failed:
        raise typer.Exit(1)


def export_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    archive: Annotated[Optional[str], typer.Option("--archive-dir", help="Markdown archive directory")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="Site origin for canonical URLs")] = None,
    ):
    """Write HTML pages, Markdown archives, assets, and feed entries for staged drafts."""
    settings = _settings(overrides={
        "staging_dir": staging, "output_dir": out, "archive_dir": archive, "site_base_url": base_url,
    })
    _export(settings)


def build_cmd(
    paths: Annotated[list[str], typer.Argument(help="Files or directories to import")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    archive: Annotated[Optional[str], typer.Option("--archive-dir", help="Markdown archive directory")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="Site origin for canonical URLs")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Accept PDF text without review; cancel field mapping prompts")] = False,
    ):
    """Run the full pipeline: import -> export."""
    settings = _settings(overrides={
        "staging_dir": staging, "output_dir": out, "archive_dir": archive, "site_base_url": base_url,
    })

    # --- import ---
    result = _import(paths, settings, yes)
    if not result.succeeded:
        _fail("Nothing imported; skipping export.")

    # --- export ---
    _export(settings)
    if result.failed:
        raise typer.Exit(1)


def preview_cmd(
    path: Annotated[str, typer.Argument(help="File to preview")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Accept PDF text without review")] = False,
    markdown: Annotated[bool, typer.Option("--markdown", help="Print Markdown instead of HTML")] = False,
    ):
    """Import one file and print its rendered body."""
    settings = _settings()
    try:
        draft = asyncio.run(import_file(Path(path), PromptResolver(assume_yes=yes), settings))
    except (DraftError, OSError) as e:
        _fail(f"Could not import {path}", e)
    for warning in draft.warnings:
        typer.echo(f"warning: {warning}", err=True)
    typer.echo(blocks_to_markdown(draft.blocks) if markdown else render_blocks(draft.blocks))


def detect_cmd(
    path: Annotated[str, typer.Argument(help="File to inspect")],
    ):
    """Print the detected input format of a file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        _fail(f"Could not read {path}", e)
    typer.echo(detect_format(data, Path(path).name).value)

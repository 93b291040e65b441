from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer

from .classifier import DEFAULT_ARCHETYPE, matching_rule
from .errors import LocatorPathError
from .lexer import tokenize
from .models import Locator
from .names_writer import apply_names_preview, generate_names_preview, unique_locators
from .pipeline import path_to_locators
from .renderer import locators_to_payload, render_locators

LOG_LEVEL_ENV = "QTLOCATORS_LOG_LEVEL"
LOG_DIR_ENV = "QTLOCATORS_LOG_DIR"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
_ERROR_EXIT_CODE = 2

app = typer.Typer(help="Translate XPath-like paths into Qt object-map locators.")


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def build_logger(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("qtlocators")
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))
    if logger.handlers:
        return logger

    logger.propagate = False
    stream_handler = _StderrHandler()
    stream_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(stream_handler)

    log_dir = os.environ.get(LOG_DIR_ENV, "").strip()
    if log_dir:
        try:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(Path(log_dir) / "qtlocators.log", encoding="utf-8")
        except OSError as exc:
            logger.warning("File logging disabled, could not open %s: %s", log_dir, exc)
        else:
            file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
            logger.addHandler(file_handler)
    return logger


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline details at DEBUG level."),
) -> None:
    build_logger(verbose)


def _collect_locators(paths: List[str]) -> list[Locator]:
    logger = logging.getLogger("qtlocators")
    collected: list[Locator] = []
    for path in paths:
        try:
            collected.extend(path_to_locators(path))
        except LocatorPathError as exc:
            logger.info("Could not translate %r: %s", path, exc)
            typer.echo(f"error: {path}: {exc}", err=True)
            raise typer.Exit(code=_ERROR_EXIT_CODE) from exc
    return unique_locators(collected)


@app.command()
def convert(
    paths: List[str] = typer.Argument(..., help="One or more locator paths."),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
) -> None:
    """Render object-map declarations for each path. Shared ancestors are emitted once."""
    if output_format not in ("text", "json"):
        typer.echo(f"error: unknown format {output_format!r}", err=True)
        raise typer.Exit(code=_ERROR_EXIT_CODE)

    locators = _collect_locators(paths)
    if output_format == "json":
        rendered = json.dumps(locators_to_payload(locators), indent=2, ensure_ascii=False) + "\n"
    else:
        rendered = render_locators(locators)

    if output is None:
        typer.echo(rendered, nl=False)
        return
    output.write_text(rendered, encoding="utf-8")
    typer.echo(f"wrote {len(locators)} locator(s) to {output}")


@app.command()
def tokens(path: str = typer.Argument(..., help="Locator path to tokenize.")) -> None:
    """Print the token stream of a path (offset, kind, text)."""
    try:
        token_list = tokenize(path)
    except LocatorPathError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=_ERROR_EXIT_CODE) from exc
    for token in token_list:
        typer.echo(f"{token.offset:>4} {token.kind:<10} {token.text}")


@app.command()
def classify(tags: List[str] = typer.Argument(..., help="Tag names to classify.")) -> None:
    """Show the archetype each tag resolves to and the rule that picked it."""
    for tag in tags:
        rule = matching_rule(tag)
        if rule is None:
            typer.echo(f"{tag} -> {DEFAULT_ARCHETYPE} (default)")
        else:
            typer.echo(f"{tag} -> {rule.label} ({rule.describe()})")


@app.command()
def merge(
    target: Path = typer.Argument(..., help="Object-map file to extend."),
    paths: List[str] = typer.Argument(..., help="Locator paths whose declarations should be added."),
    apply: bool = typer.Option(False, "--apply", help="Write the changes instead of printing a diff."),
) -> None:
    """Preview or apply new declarations in an existing object-map file."""
    locators = _collect_locators(paths)
    preview = generate_names_preview(target, locators)
    for note in preview.notes:
        typer.echo(f"note: {note}", err=True)
    if preview.original_source is None:
        typer.echo(f"error: {preview.message}", err=True)
        raise typer.Exit(code=1)
    if not preview.ok:
        typer.echo(preview.message)
        return

    if not apply:
        typer.echo(preview.diff_text, nl=False)
        return

    ok, message, _ = apply_names_preview(preview)
    if not ok:
        typer.echo(f"error: {message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(message)

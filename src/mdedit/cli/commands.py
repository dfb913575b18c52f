"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdedit.config import Settings, load_config
from mdedit.core.errors import MarkdownError
from mdedit.core.pipeline import discover_files, normalize_markdown, render_markdown, restore_markdown
from mdedit.core.utils.diff import diff_summary, unified_diff


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def _write(text: str, out: Optional[str]) -> None:
    """Write to the --out file, or stdout when none is given."""
    if out is None:
        typer.echo(text)
        return
    Path(out).parent.mkdir(parents=True, exist_ok=True)
    Path(out).write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {out}", err=True)


def render_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown file to render")],
    out: Annotated[Optional[str], typer.Option("--out", help="Output file; stdout when omitted")] = None,
    no_wraps: Annotated[bool, typer.Option("--no-wraps", help="Keep single newlines as soft breaks")] = False,
    max_chunks: Annotated[Optional[int], typer.Option("--max-chunks", help="Max chunks; 0 = unlimited")] = None,
    ):
    """Render Markdown into the annotated editor document."""
    settings = _settings(overrides={"soft_wraps": False if no_wraps else None, "max_chunks": max_chunks})
    src = _read(path)
    try:
        document = render_markdown(src, settings)
    except MarkdownError as e:
        _fail(f"Render failed for {path}", e)
    _write(document.html, out)


def restore_cmd(
    path: Annotated[Path, typer.Argument(help="Annotated document to restore")],
    out: Annotated[Optional[str], typer.Option("--out", help="Output file; stdout when omitted")] = None,
    ):
    """Restore Markdown from an annotated editor document."""
    _settings()
    _write(restore_markdown(_read(path)), out)


def check_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown file or directory to check")],
    show_diff: Annotated[bool, typer.Option("--diff", help="Print a unified diff for each mismatch")] = False,
    ):
    """Render then restore each file and report whether the round trip keeps it intact."""
    settings = _settings()
    files = discover_files(path)
    if not files:
        typer.echo(f"No Markdown files found at {path}.")
        raise typer.Exit(1)

    mismatched = 0
    for p in files:
        src = _read(p)
        try:
            restored = restore_markdown(render_markdown(src, settings).html)
        except MarkdownError as e:
            _fail(f"Render failed for {p}", e)
        expected, actual = normalize_markdown(src) + "\n", normalize_markdown(restored) + "\n"
        if expected == actual:
            typer.echo(f"  ok: {p}")
            continue
        mismatched += 1
        stats = diff_summary(expected, actual)
        typer.echo(f"  changed: {p} (+{stats['added']} -{stats['deleted']})")
        if show_diff:
            typer.echo("".join(unified_diff(expected, actual, str(p), f"{p} (restored)")))

    typer.echo(f"Checked {len(files)} file(s), {mismatched} changed")
    if mismatched:
        raise typer.Exit(1)

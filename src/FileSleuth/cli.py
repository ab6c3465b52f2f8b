# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.cli",
#   "purpose": "Typer command line interface for identification, listing and extraction",
#   "sections": [
#     {"id": "clicontext", "name": "CliContext", "anchor": "class-clicontext", "kind": "class"},
#     {"id": "get-context", "name": "get_context", "anchor": "function-get-context", "kind": "function"},
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "identify-cmd", "name": "identify_cmd", "anchor": "function-identify-cmd", "kind": "function"},
#     {"id": "list-cmd", "name": "list_cmd", "anchor": "function-list-cmd", "kind": "function"},
#     {"id": "extract-cmd", "name": "extract_cmd", "anchor": "function-extract-cmd", "kind": "function"},
#     {"id": "readme-cmd", "name": "readme_cmd", "anchor": "function-readme-cmd", "kind": "function"},
#     {"id": "version-cmd", "name": "version_cmd", "anchor": "function-version-cmd", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""FileSleuth command line interface.

Provides a Typer CLI with:
- Global options (-v/-vv, --log-dir)
- Settings and logging set up once per invocation
- ``identify``, ``list``, ``extract``, ``readme`` and ``version`` commands
- Library errors reported in red with exit code 1

Example:
    $ filesleuth identify release.zip
    $ filesleuth list upload.bin --name release.lha
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from . import __version__
from .errors import FileSleuthError
from .logging_config import setup_logging
from .settings import FileSleuthSettings, get_settings

LOGGER = logging.getLogger("FileSleuth.cli")

_console = Console()

_VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


class CliContext:
    """Shared state for one CLI invocation.

    Holds the resolved settings, the console printer and the verbosity.
    """

    def __init__(self, settings: FileSleuthSettings, verbosity: int = 0) -> None:
        self.settings = settings
        self.verbosity = verbosity
        self.console = _console

    def log_debug(self, message: str) -> None:
        """Print ``message`` when running with ``-vv``."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]DEBUG: {escape(message)}[/dim]")

    def fail(self, exc: Exception) -> NoReturn:
        """Report ``exc`` and exit with status 1."""
        LOGGER.error("%s", exc, extra={"stage": "cli"})
        self.console.print(f"[red]Error: {escape(str(exc))}[/red]", highlight=False)
        raise typer.Exit(1)


app = typer.Typer(
    name="filesleuth",
    help="Identify files by content and inspect archives",
    no_args_is_help=True,
)

_context: Optional[CliContext] = None


def get_context() -> CliContext:
    """Return the context built by :func:`main`.

    Raises:
        RuntimeError: If no command callback has run yet.
    """
    if _context is None:
        raise RuntimeError("CLI context not initialized")
    return _context


@app.callback()
def main(
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
    log_dir: Optional[Path] = typer.Option(
        None,
        "--log-dir",
        help="Write JSON log files to this directory",
    ),
) -> None:
    """FileSleuth: content-based file identification and archive inspection."""
    global _context  # noqa: PLW0603

    try:
        settings = get_settings(copy=True)
    except FileSleuthError as exc:
        _console.print(f"[red]Error loading settings: {escape(str(exc))}[/red]")
        raise typer.Exit(1)
    level = _VERBOSITY_LEVELS.get(min(verbosity, 2))
    if level is not None:
        settings.log_level = level
    setup_logging(settings, log_dir=log_dir)
    _context = CliContext(settings, verbosity=verbosity)
    _context.log_debug(f"content root: {settings.content_root}")


@app.command("identify")
def identify_cmd(
    paths: List[Path] = typer.Argument(..., help="Files to identify"),
) -> None:
    """Identify each file by its content."""
    from .MagicNumber import ExtensionCheck, identify

    ctx = get_context()
    table = Table(title="Identification")
    table.add_column("File")
    table.add_column("Signature")
    table.add_column("Title")
    table.add_column("Details")
    for path in paths:
        try:
            found = identify(path)
        except OSError as exc:
            ctx.fail(exc)
        details = []
        if found.executable is not None:
            details.append(str(found.executable))
        if found.description:
            details.append(found.description)
        if found.match is not None and found.match is not ExtensionCheck.MATCHES:
            details.append(f"extension {found.match.value}")
        table.add_row(
            Text(path.name), Text(found.label), Text(found.title), Text("; ".join(details))
        )
    ctx.console.print(table)


@app.command("list")
def list_cmd(
    path: Path = typer.Argument(..., help="Archive to list"),
    name: Optional[str] = typer.Option(None, "--name", help="Filename the archive was claimed as"),
) -> None:
    """Print the members of an archive, one per line."""
    from .ArchiveContent import list_contents

    ctx = get_context()
    try:
        contents = list_contents(path, name or path.name, settings=ctx.settings)
    except FileSleuthError as exc:
        ctx.fail(exc)
    ctx.log_debug(f"read as {contents.extension} using {contents.method}")
    for member in contents.files:
        ctx.console.print(member, markup=False, highlight=False, soft_wrap=True)


@app.command("extract")
def extract_cmd(
    path: Path = typer.Argument(..., help="Archive to extract"),
    dest: Path = typer.Argument(..., help="Existing destination directory"),
    targets: Optional[List[str]] = typer.Argument(None, help="Members to extract; all if omitted"),
    name: Optional[str] = typer.Option(None, "--name", help="Filename the archive was claimed as"),
) -> None:
    """Extract members of an archive into a directory."""
    from .ArchiveContent import extract

    ctx = get_context()
    try:
        method = extract(path, dest, name or path.name, targets or (), settings=ctx.settings)
    except FileSleuthError as exc:
        ctx.fail(exc)
    ctx.console.print(
        f"[green]Extracted[/green] {escape(path.name)} with {method}", highlight=False
    )


@app.command("readme")
def readme_cmd(
    path: Path = typer.Argument(..., help="Archive to search"),
    name: Optional[str] = typer.Option(None, "--name", help="Filename the archive was claimed as"),
) -> None:
    """Print the member that best serves as the archive's README or NFO."""
    from .ArchiveContent import list_contents, readme

    ctx = get_context()
    filename = name or path.name
    try:
        contents = list_contents(path, filename, settings=ctx.settings)
    except FileSleuthError as exc:
        ctx.fail(exc)
    best = readme(filename, contents.files)
    if best is None:
        ctx.console.print("[yellow]No README or NFO found[/yellow]")
        raise typer.Exit(1)
    ctx.console.print(best, markup=False, highlight=False, soft_wrap=True)


@app.command("version")
def version_cmd() -> None:
    """Show version information."""
    ctx = get_context()
    ctx.console.print(f"[bold]filesleuth[/bold] version {__version__}", highlight=False)


__all__ = ["app", "CliContext", "get_context", "main"]

from __future__ import annotations

from pathlib import Path

import typer

from crate_search import __version__
from crate_search.log_utils import configure_logging
from crate_search.models import Crate
from crate_search.tui import CrateSearchTui

__all__ = [
    "Crate",
    "CrateSearchTui",
    "cli",
    "run",
]


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"crate-search {__version__}")
    raise typer.Exit()


cli = typer.Typer(
    add_completion=False,
    help="Search crates.io from a Textual TUI.",
)


@cli.callback(invoke_without_command=True)
def run(
    query: str | None = typer.Option(
        None,
        "--query",
        "-q",
        help="Query submitted as soon as the interface starts.",
    ),
    per_page: int = typer.Option(
        50,
        "--per-page",
        help="Number of results requested per search (1-100).",
    ),
    timeout: float = typer.Option(
        10.0,
        "--timeout",
        help="Network timeout in seconds for searches and readme downloads.",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Write logs to this file; nothing is logged otherwise.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Include debug messages in the log file.",
    ),
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    if not 1 <= per_page <= 100:
        typer.echo(f"--per-page must be between 1 and 100, got {per_page}", err=True)
        raise typer.Exit(code=1)
    if timeout <= 0:
        typer.echo(f"--timeout must be positive, got {timeout}", err=True)
        raise typer.Exit(code=1)

    configure_logging(log_file, verbose=verbose)
    CrateSearchTui(
        initial_query=query,
        per_page=per_page,
        timeout_seconds=timeout,
    ).run()


if __name__ == "__main__":
    cli()

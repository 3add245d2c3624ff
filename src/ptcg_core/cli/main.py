"""PTCG CLI - deck analysis from the command line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from ptcg_core.analyzer import ENGINE_VERSION, analyze
from ptcg_core.cli.context import err_console, load_deck_file, output_json
from ptcg_core.cli.display import render_analysis, render_snapshot
from ptcg_core.config import get_settings
from ptcg_core.data.meta_snapshot import get_meta_snapshot
from ptcg_core.exceptions import MetaSnapshotError

console = Console()

# =============================================================================
# Main CLI app
# =============================================================================

cli = typer.Typer(
    name="ptcg",
    help="PTCG CLI - Pokemon TCG deck analysis.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@cli.callback()
def main(
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Show debug logs")] = False,
) -> None:
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


# =============================================================================
# Commands
# =============================================================================


@cli.command("analyze")
def analyze_cmd(
    deck_file: Annotated[Path, typer.Argument(help="JSON deck file")],
    format_name: Annotated[str, typer.Option("-f", "--format", help="Format to check against")] = "standard",
    as_json: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
) -> None:
    """Analyze a deck."""
    entries = load_deck_file(deck_file)
    result = analyze(entries, format_name=format_name)

    if as_json:
        output_json(result)
    else:
        render_analysis(console, result)

    if result.metadata.emergency:
        raise typer.Exit(1)


@cli.command()
def meta(
    as_json: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
) -> None:
    """Show the loaded meta snapshot."""
    try:
        snapshot = get_meta_snapshot()
    except MetaSnapshotError as e:
        err_console.print(f"[red]{e.message}[/]")
        raise typer.Exit(1) from e

    if as_json:
        output_json(snapshot)
    else:
        render_snapshot(console, snapshot)


@cli.command()
def version() -> None:
    """Show the engine version."""
    console.print(f"ptcg-core {ENGINE_VERSION}")


if __name__ == "__main__":
    cli()

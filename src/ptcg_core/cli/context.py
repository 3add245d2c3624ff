"""Deck file loading and output helpers for the CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

err_console = Console(stderr=True)


def load_deck_file(deck_file: Path) -> Any:
    """Read a JSON deck file.

    The file holds a list of ``{"card": {...}, "quantity": n}`` objects, or an
    object with such a list under ``"entries"``. Entry validation is left to
    the analyzer so malformed entries are reported, not fatal.
    """
    try:
        data = json.loads(deck_file.read_text(encoding="utf-8"))
    except OSError as e:
        err_console.print(f"[red]Cannot read {deck_file}:[/] {e}")
        raise typer.Exit(1) from e
    except json.JSONDecodeError as e:
        err_console.print(f"[red]{deck_file} is not valid JSON:[/] {e.msg} (line {e.lineno})")
        raise typer.Exit(1) from e

    if isinstance(data, dict) and "entries" in data:
        return data["entries"]
    return data


def output_json(data: Any) -> None:
    """Output data as JSON (plain text, no Rich formatting)."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    # Plain print keeps ANSI codes out of JSON output
    print(json.dumps(data, indent=2, default=str))

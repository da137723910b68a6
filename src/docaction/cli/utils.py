"""
CLI utility helpers — output formatting and error reporting.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docaction.core.errors import ActionError, DocActionError
from docaction.operations.normalizer import to_json_text

console = Console()
err_console = Console(stderr=True)


# ── Output helpers ───────────────────────────────────────────────────────


def output_value(value: Any, *, as_json: bool = False, title: str = "") -> None:
    """Render an action result to the terminal."""
    if isinstance(value, str) and as_json:
        # already stringified by the action
        console.print_json(value)
        return

    if as_json:
        console.print_json(to_json_text(value))
        return

    if isinstance(value, list):
        if not value:
            console.print("[dim]No documents.[/dim]")
        elif all(isinstance(item, Mapping) for item in value):
            _print_table(value, title=title)
        else:
            for item in value:
                console.print(f"  {item}", markup=False)
    elif isinstance(value, Mapping):
        _print_dict(value, title=title)
    elif value is None:
        console.print("[dim]No document matched.[/dim]")
    else:
        console.print(str(value), markup=False)


def fail(error: DocActionError) -> NoReturn:
    """Print an error with the stage it came from and exit non-zero."""
    stage = error.record.stage if isinstance(error, ActionError) else error.stage
    err_console.print(
        f"[bold red]Error[/bold red] ({stage.value}): {escape(error.message)}",
        markup=True,
        highlight=False,
    )
    raise typer.Exit(code=1)


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list[Mapping[str, Any]], *, title: str = "") -> None:
    """Render a list of documents as a Rich table (union of their keys)."""
    columns: list[str] = []
    for item in items:
        for key in item:
            if key not in columns:
                columns.append(key)
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in columns:
        table.add_column(str(col), overflow="fold")
    for item in items:
        table.add_row(*(escape(str(item.get(col, ""))) for col in columns))
    console.print(table)


def _print_dict(data: Mapping[str, Any], *, title: str = "") -> None:
    """Render a single document as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{escape(str(k))}[/cyan]: {escape(str(v))}")

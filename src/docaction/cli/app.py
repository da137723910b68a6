"""
Root Typer application for the docaction CLI.

    docaction run shop orders find '[{"status": "open"}]' --uri mongodb://localhost
    docaction operations
"""

from __future__ import annotations

import asyncio
import json

import typer
from rich.markup import escape
from rich.table import Table

from docaction.cli.utils import console, err_console, fail, output_value
from docaction.core.errors import ActionError, ConfigError
from docaction.core.logging import configure_logging
from docaction.core.protocols import MemorySink, StorageSlot
from docaction.core.settings import get_settings
from docaction.operations.registry import operation_registry
from docaction.ops.action import run_database_action
from docaction.ops.requests import ActionInputs

app = typer.Typer(
    name="docaction",
    help="docaction — run one allow-listed operation against a MongoDB collection.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("docaction")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"docaction {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override DOCACTION_LOG_LEVEL."),
) -> None:
    """docaction CLI — database actions and the operation vocabulary."""
    try:
        settings = get_settings()
    except ConfigError as e:
        fail(e)
    configure_logging(level=log_level or settings.log_level, json_format=settings.log_json)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def run(
    database: str = typer.Argument(..., help="Database name"),
    collection: str = typer.Argument(..., help="Collection name"),
    method: str = typer.Argument(..., help="Operation name, e.g. find or updateOne"),
    args_json: str = typer.Argument("[]", help="Arguments as a JSON array"),
    uri: str | None = typer.Option(None, "--uri", "-u", help="Connection string (default: DOCACTION_DEFAULT_URI)"),
    stringify: bool = typer.Option(False, "--stringify", help="Return the result as JSON text"),
    keep_open: bool = typer.Option(False, "--keep-open", help="Do not close the connection afterwards"),
    max_documents: int | None = typer.Option(None, "--max-documents", min=1, help="Fail if a cursor holds more documents"),
    store: str = typer.Option(
        "temporary:result", "--store", help="Result slot as type:name; 'none' skips storing"
    ),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Run one operation and print its result."""
    settings = get_settings()
    if max_documents is not None:
        settings = settings.model_copy(update={"max_documents": max_documents})

    inputs = ActionInputs(
        connection=uri or settings.default_uri,
        database_name=database,
        collection_name=collection,
        method_name=method,
        args_json=args_json,
        stringify_result=stringify,
        close_connection=not keep_open,
        store=StorageSlot.parse(store),
    )
    sink = MemorySink()
    try:
        result = asyncio.run(run_database_action(inputs, sink, settings=settings))
    except ActionError as e:
        fail(e)

    if inputs.store in sink:
        err_console.print(f"[dim]Stored in {escape(str(inputs.store))}[/dim]")
    output_value(result, as_json=json_out or stringify, title=f"{database}.{collection}")


@app.command()
def operations(
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List the allow-listed operations."""
    specs = [spec.describe() for spec in operation_registry.specs()]
    if json_out:
        console.print_json(json.dumps(specs))
        return

    table = Table(title="Operations", pad_edge=False)
    for col in ("name", "label", "method", "params", "cursor"):
        table.add_column(col)
    for spec in specs:
        table.add_row(
            spec["name"],
            spec["label"],
            spec["method"],
            ", ".join(spec["params"]),
            "yes" if spec["cursor"] else "",
        )
    console.print(table)


if __name__ == "__main__":  # pragma: no cover
    app()

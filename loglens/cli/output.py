"""Output formatting utilities for CLI.

Rows, pipelines and log messages are printed as plain Text so square
brackets in them are never read as rich markup. Status lines (info,
warnings, errors) go to stderr; only results are written to stdout.

Result rows from a Logs Insights query do not all share the same fields, so
every renderer works on the union of columns rather than the first row.
"""

import csv
import json
from io import StringIO
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

console = Console()
console_err = Console(stderr=True)

OUTPUT_FORMATS = ("table", "json", "csv")

Row = dict[str, Any]


def collect_columns(data: list[Row]) -> list[str]:
    """Union of keys across rows in first-seen order."""
    columns: dict[str, None] = {}
    for row in data:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def print_table(data: list[Row], title: str | None = None, columns: list[str] | None = None) -> None:
    if not data:
        console.print("[yellow]No rows returned[/yellow]")
        return

    columns = columns or collect_columns(data)
    table = Table(title=title, show_header=True, header_style="bold cyan")

    for col in columns:
        # @message is the wide column; everything else stays on one line
        table.add_column(col, style="white", no_wrap=col != "@message")

    for row in data:
        table.add_row(*[Text(str(row.get(col, ""))) for col in columns])

    console.print(table)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def print_csv(data: list[Row], columns: list[str] | None = None) -> None:
    """Print rows as CSV; cells missing from a row are left empty."""
    if not data:
        return

    output = StringIO()
    writer = csv.DictWriter(output, fieldnames=columns or collect_columns(data), restval="")
    writer.writeheader()
    writer.writerows(data)

    console.print(output.getvalue(), end="", markup=False, highlight=False, soft_wrap=True)


def print_rows(
    data: list[Row],
    output_format: str,
    title: str | None = None,
    columns: list[str] | None = None,
) -> None:
    """Print rows in the requested output format.

    Args:
        data: Query rows or stream events as dictionaries
        output_format: One of OUTPUT_FORMATS
        title: Table title (ignored for json and csv)
        columns: Column order (defaults to the union of keys)
    """
    if output_format == "json":
        print_json(data)
    elif output_format == "csv":
        print_csv(data, columns)
    else:
        print_table(data, title=title, columns=columns)


def _status_line(symbol: str, style: str, message: str) -> Text:
    return Text.assemble((symbol, style), " ", message)


def print_success(message: str) -> None:
    console.print(_status_line("✓", "green", message))


def print_error(message: str) -> None:
    console_err.print(_status_line("✗", "red", message), soft_wrap=True)


def print_warning(message: str) -> None:
    console_err.print(_status_line("⚠", "yellow", message), soft_wrap=True)


def print_info(message: str) -> None:
    console_err.print(_status_line("ℹ", "blue", message), soft_wrap=True)


def print_panel(content: str, title: str | None = None, border_style: str = "cyan") -> None:
    """Print content verbatim in a panel; pipeline text is never read as markup."""
    console.print(Panel(Text(content), title=title, border_style=border_style))

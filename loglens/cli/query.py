"""Query commands for LogLens."""

import asyncio
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from loglens.cli.output import (
    OUTPUT_FORMATS,
    print_error,
    print_info,
    print_json,
    print_panel,
    print_rows,
    print_warning,
)
from loglens.config import get_settings
from loglens.logging_config import get_logger, log_error, log_operation
from loglens.query import (
    QueryExecutor,
    check_patterns,
    parse_time_selector,
    translate_to_text,
)
from loglens.transport import transport_from_settings

app = typer.Typer(help="Translate and run SQL queries")
console = Console()
logger = get_logger(__name__)


def read_sql(sql: Optional[str], file: Optional[Path]) -> str:
    """Resolve query text from --sql or --file, exiting on bad input."""
    if not sql and not file:
        print_error("Provide SQL via --sql or --file")
        raise typer.Exit(1)

    if sql and file:
        print_error("Provide either --sql or --file, not both")
        raise typer.Exit(1)

    if file:
        print_info(f"Reading SQL from: {file}")
        query_sql = file.read_text().strip()
    else:
        query_sql = sql.strip()

    if not query_sql:
        print_error("SQL query cannot be empty")
        raise typer.Exit(1)

    return query_sql


def _show_warnings(query_sql: str) -> None:
    for warning in check_patterns(query_sql):
        print_warning(warning)


@app.command()
def translate(
    sql: Optional[str] = typer.Option(None, "--sql", "-s", help="SQL query string"),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="SQL file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """
    Translate a SQL query into a Logs Insights pipeline without running it.

    Examples:
        loglens query translate --sql "SELECT @message WHERE @message LIKE '%error%' LIMIT 5"

        loglens query translate --file query.sql
    """
    query_sql = read_sql(sql, file)
    _show_warnings(query_sql)

    pipeline = translate_to_text(query_sql)
    log_operation(logger, "translate", pipeline=pipeline)

    console.print(pipeline, markup=False, highlight=False, soft_wrap=True)


@app.command()
def run(
    source: str = typer.Option(..., "--source", "-g", help="Log group name"),
    sql: Optional[str] = typer.Option(None, "--sql", "-s", help="SQL query string"),
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="SQL file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    time_mode: str = typer.Option(
        "1h", "--time", "-t", help="Time window: 1h, 6h, 24h, all, custom"
    ),
    start: Optional[str] = typer.Option(
        None, "--start", help="Custom window start (local time, ISO format)"
    ),
    end: Optional[str] = typer.Option(
        None, "--end", help="Custom window end (local time, ISO format)"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Query timeout in seconds (unbounded by default)"
    ),
    output_format: str = typer.Option(
        "table", "--output", "-o", help="Output format: table, json, csv"
    ),
    mock: bool = typer.Option(
        False, "--mock", help="Use synthetic data instead of CloudWatch"
    ),
) -> None:
    """
    Run a SQL query against a log group and print the result rows.

    The query is translated, submitted as an asynchronous job and polled
    until it finishes.

    Examples:
        loglens query run --source /aws/lambda/api --sql "SELECT count(*) GROUP BY @logStream"

        loglens query run --source /aws/lambda/api --file query.sql --time 24h --output json

        loglens query run --source /aws/lambda/api --sql "SELECT @message" \\
            --time custom --start 2024-01-01T00:00 --end 2024-01-02T00:00
    """
    try:
        query_sql = read_sql(sql, file)

        if output_format not in OUTPUT_FORMATS:
            print_error(f"Invalid output format: {output_format}")
            print_info(f"Valid formats: {', '.join(OUTPUT_FORMATS)}")
            raise typer.Exit(1)

        try:
            selector = parse_time_selector(time_mode, start, end)
        except ValueError as e:
            print_error(str(e))
            raise typer.Exit(1)

        _show_warnings(query_sql)

        settings = get_settings()
        if timeout is None:
            timeout = settings.query_timeout_seconds

        if output_format == "table":
            print_info(f"Querying log group: {source}")
        log_operation(logger, "query", source=source, time_mode=time_mode)

        async def _execute():
            transport = transport_from_settings(settings, mock=mock or None)
            executor = QueryExecutor(
                transport, poll_interval_seconds=settings.poll_interval_seconds
            )
            return await executor.run_query(
                source=source,
                sql=query_sql,
                selector=selector,
                now_ms=int(time.time() * 1000),
                timeout_seconds=timeout,
            )

        result = asyncio.run(_execute())

        if output_format == "json":
            print_json(result.to_dict())
        else:
            if output_format == "table":
                print_panel(result.query, title="Pipeline")
            print_rows(result.rows, output_format, columns=result.columns)

        if output_format == "table":
            print_info(
                f"Rows: {result.row_count:,} | Polls: {result.poll_count} | "
                f"Time: {result.execution_time_seconds:.3f}s"
            )

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Query failed: {getattr(e, 'message', str(e))}")
        log_error(logger, e, "query", source=source)
        raise typer.Exit(1)

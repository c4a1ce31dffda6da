"""Stream commands for LogLens."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Optional

import typer
from rich.console import Console

from loglens.cli.output import (
    OUTPUT_FORMATS,
    print_error,
    print_info,
    print_json,
    print_rows,
)
from loglens.config import get_settings
from loglens.logging_config import get_logger, log_error, log_operation
from loglens.query import StreamFetcher, parse_time_selector
from loglens.query.models import LogEvent
from loglens.transport import transport_from_settings

app = typer.Typer(help="Fetch raw log events")
console = Console()
logger = get_logger(__name__)


def _event_row(event: LogEvent) -> dict[str, str]:
    timestamp = datetime.fromtimestamp(event.timestamp_ms / 1000, tz=timezone.utc)
    return {
        "timestamp": timestamp.isoformat(timespec="milliseconds"),
        "stream": event.log_stream or "",
        "message": event.message.rstrip("\n"),
    }


@app.command()
def fetch(
    source: str = typer.Option(..., "--source", "-g", help="Log group name"),
    pattern: Optional[str] = typer.Option(
        None, "--pattern", "-p", help="CloudWatch filter pattern"
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
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", min=1, help="Maximum number of events"
    ),
    output_format: str = typer.Option(
        "table", "--output", "-o", help="Output format: table, json, csv"
    ),
    mock: bool = typer.Option(
        False, "--mock", help="Use synthetic data instead of CloudWatch"
    ),
) -> None:
    """
    Fetch raw log events from a log group, newest first.

    Examples:
        loglens stream fetch --source /aws/lambda/api

        loglens stream fetch --source /aws/lambda/api --pattern ERROR --time 6h

        loglens stream fetch --source /aws/lambda/api --limit 500 --output json
    """
    try:
        if output_format not in OUTPUT_FORMATS:
            print_error(f"Invalid output format: {output_format}")
            print_info(f"Valid formats: {', '.join(OUTPUT_FORMATS)}")
            raise typer.Exit(1)

        try:
            selector = parse_time_selector(time_mode, start, end)
        except ValueError as e:
            print_error(str(e))
            raise typer.Exit(1)

        settings = get_settings()
        if limit is None:
            limit = settings.stream_default_limit

        log_operation(logger, "stream", source=source, time_mode=time_mode, limit=limit)

        async def _fetch():
            transport = transport_from_settings(settings, mock=mock or None)
            fetcher = StreamFetcher(transport)
            return await fetcher.fetch_stream(
                source=source,
                pattern=pattern,
                selector=selector,
                limit=limit,
                now_ms=int(time.time() * 1000),
            )

        result = asyncio.run(_fetch())

        if output_format == "json":
            print_json(result.to_dict())
            return

        print_rows([_event_row(event) for event in result.events], output_format)

        if output_format == "table":
            print_info(
                f"Events: {result.event_count:,} | "
                f"Time: {result.execution_time_seconds:.3f}s"
            )

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Fetch failed: {getattr(e, 'message', str(e))}")
        log_error(logger, e, "stream", source=source)
        raise typer.Exit(1)

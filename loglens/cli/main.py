"""LogLens command line entry point.

Global options are resolved here once per invocation: ``--config`` reloads
the settings singleton from the given YAML file and ``--verbose`` raises the
log level before logging is configured. Subcommands read settings through
``get_settings()``.
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from loglens import __version__
from loglens.cli.output import console, console_err
from loglens.config import get_settings
from loglens.exceptions import LogLensError
from loglens.logging_config import setup_logging

app = typer.Typer(
    name="loglens",
    help="LogLens - SQL-shaped queries against CloudWatch Logs",
    add_completion=True,
    rich_markup_mode="rich",
)

_verbose = False


def _show_version(value: bool) -> None:
    if value:
        console.print(f"LogLens version {__version__} (Python {sys.version.split()[0]})")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version information and exit",
        callback=_show_version,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file (default: ~/.loglens/config.yaml)",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """
    Translate a small SQL subset into Logs Insights pipelines, run them
    against a log group and fetch raw filtered events.
    """
    global _verbose
    _verbose = verbose

    settings = get_settings(config_path=config, reload=config is not None)
    if verbose:
        settings.log_level = "DEBUG"

    setup_logging()


def handle_error(error: Exception) -> None:
    """Print an error that escaped the Typer app and exit with status 1.

    Must be called from an ``except`` block: in verbose mode the active
    traceback is rendered.
    """
    if isinstance(error, LogLensError):
        console_err.print(f"[red]Error ({type(error).__name__}):[/red] {escape(error.message)}")
        if _verbose:
            for key, value in error.context.items():
                console_err.print(f"  {key}: {escape(str(value))}")
    else:
        console_err.print(f"[red]Unexpected error:[/red] {escape(str(error))}")
        if _verbose:
            console_err.print_exception()

    sys.exit(1)


from loglens.cli import api, config, query, stream  # noqa: E402

app.add_typer(config.app, name="config", help="Show effective configuration")
app.add_typer(query.app, name="query", help="Translate and run SQL queries")
app.add_typer(stream.app, name="stream", help="Fetch raw log events")
app.add_typer(api.app, name="api", help="Run or check the HTTP API")


def main_cli() -> None:
    try:
        app()
    except KeyboardInterrupt:
        console_err.print("[yellow]Interrupted; any submitted query keeps running remotely[/yellow]")
        sys.exit(130)
    except Exception as e:
        handle_error(e)


if __name__ == "__main__":
    main_cli()

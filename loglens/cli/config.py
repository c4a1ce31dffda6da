"""Configuration management CLI commands."""

import json
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from loglens.cli.output import print_error, print_info, print_panel
from loglens.config import Settings, get_settings
from loglens.logging_config import get_logger

app = typer.Typer(help="Configuration management")
console = Console()
logger = get_logger(__name__)

SECTIONS = ("aws", "query", "stream", "server", "logging")


@app.command("show")
def show_config(
    section: Optional[str] = typer.Option(
        None,
        "--section",
        "-s",
        help="Show specific section: aws, query, stream, server, logging",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, yaml, json",
    ),
) -> None:
    """
    Show current configuration.

    Displays all LogLens configuration settings or a specific section.
    """
    try:
        if section and section not in SECTIONS:
            print_error(f"Unknown section: {section}")
            print_info(f"Available sections: {', '.join(SECTIONS)}")
            raise typer.Exit(1)

        settings = get_settings()

        if format == "yaml":
            _show_config_yaml(settings, section)
        elif format == "json":
            _show_config_json(settings, section)
        else:
            _show_config_table(settings, section)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Failed to load configuration")
        print_error(f"Failed to load configuration: {str(e)}")
        raise typer.Exit(1)


def _show_config_table(settings: Settings, section: Optional[str] = None) -> None:
    """Display configuration in table format."""
    console.print()
    print_panel("LogLens Configuration", border_style="cyan")
    console.print()

    config_dict = _settings_to_dict(settings)
    names = [section] if section else list(SECTIONS)

    for name in names:
        console.print(_section_table(name, config_dict[name]))
        console.print()


def _show_config_yaml(settings: Settings, section: Optional[str] = None) -> None:
    """Display configuration in YAML format."""
    config_dict = _select(_settings_to_dict(settings), section)

    config_yaml = yaml.dump(config_dict, default_flow_style=False, sort_keys=False)
    syntax = Syntax(config_yaml, "yaml", theme="monokai", line_numbers=True)
    console.print(syntax)


def _show_config_json(settings: Settings, section: Optional[str] = None) -> None:
    """Display configuration in JSON format."""
    config_dict = _select(_settings_to_dict(settings), section)

    json_str = json.dumps(config_dict, indent=2)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=True)
    console.print(syntax)


def _select(config_dict: dict, section: Optional[str]) -> dict:
    if section:
        return {section: config_dict.get(section, {})}
    return config_dict


def _display(value) -> str:
    if value is None:
        return "Not configured"
    return str(value)


def _section_table(name: str, values: dict) -> Table:
    """Build a two-column table for one configuration section."""
    table = Table(
        title=f"{name.capitalize()} Settings", show_header=True, header_style="bold cyan"
    )
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in values.items():
        table.add_row(key.replace("_", " ").title(), _display(value))

    return table


def _settings_to_dict(settings: Settings) -> dict:
    """Group settings into display sections."""
    return {
        "aws": {
            "region": settings.aws_region,
            "profile": settings.aws_profile,
            "endpoint_url": settings.aws_endpoint_url,
            "mock_mode": settings.mock_mode,
        },
        "query": {
            "poll_interval_seconds": settings.poll_interval_seconds,
            "timeout_seconds": settings.query_timeout_seconds,
        },
        "stream": {
            "default_limit": settings.stream_default_limit,
        },
        "server": {
            "host": settings.loglens_host,
            "port": settings.loglens_port,
        },
        "logging": {
            "level": settings.log_level,
            "format": settings.log_format,
        },
    }

"""CLI module for LogLens."""

from loglens.cli.main import app, main_cli

__all__ = ["app", "main_cli"]

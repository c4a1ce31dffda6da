"""Tests for config and top-level CLI options."""

import json

import pytest
from typer.testing import CliRunner

from loglens.cli.main import app

runner = CliRunner()


class TestConfigShow:
    """Tests for config show command."""

    def test_show_table(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "LogLens Configuration" in result.stdout
        assert "us-east-1" in result.stdout

    def test_show_section_json(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "eu-central-1")

        result = runner.invoke(app, ["config", "show", "--section", "aws", "--format", "json"])

        assert result.exit_code == 0
        assert "eu-central-1" in result.stdout
        assert "poll_interval_seconds" not in result.stdout

    def test_show_unknown_section(self):
        result = runner.invoke(app, ["config", "show", "--section", "database"])

        assert result.exit_code == 1
        assert "Unknown section" in result.output

    def test_config_file_option(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("aws:\n  region: sa-east-1\nstream:\n  default_limit: 5\n")

        result = runner.invoke(
            app,
            ["--config", str(config_file), "config", "show", "--section", "aws", "-f", "yaml"],
        )

        assert result.exit_code == 0
        assert "sa-east-1" in result.stdout


class TestMainOptions:
    """Tests for global options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "LogLens version" in result.stdout

    def test_verbose_sets_debug(self):
        from loglens.config import get_settings

        result = runner.invoke(app, ["--verbose", "config", "show", "-s", "logging", "-f", "json"])

        assert result.exit_code == 0
        assert get_settings().log_level == "DEBUG"
        assert json.dumps("DEBUG") in result.stdout


class TestHandleError:
    """Tests for errors that escape the Typer app."""

    def test_domain_error_printed_verbatim(self, capsys):
        from loglens.cli.main import handle_error
        from loglens.exceptions import SubmitFailedError

        with pytest.raises(SystemExit) as exc_info:
            handle_error(SubmitFailedError("bad pattern /[bold]x/"))

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "SubmitFailedError" in captured.err
        assert "/[bold]x/" in captured.err
        assert captured.out == ""

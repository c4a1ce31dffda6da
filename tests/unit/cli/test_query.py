"""Tests for query CLI commands."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from loglens.cli.main import app
from loglens.exceptions import JobFailedError, SubmitFailedError
from loglens.query.models import QueryResult, TimeRange

runner = CliRunner()


def make_result(rows):
    return QueryResult(
        rows=rows,
        query="fields @message | limit 2",
        source="app-logs",
        job_id="job-9",
        time_range=TimeRange(start_ms=0, end_ms=1000),
        poll_count=2,
        execution_time_seconds=0.25,
    )


class TestQueryTranslate:
    """Tests for query translate command."""

    def test_translate_inline_sql(self):
        result = runner.invoke(
            app,
            [
                "query",
                "translate",
                "--sql",
                "SELECT @message FROM x WHERE @message LIKE '%error%' ORDER BY @timestamp LIMIT 5",
            ],
        )

        assert result.exit_code == 0
        assert (
            "filter @message like /error/ | fields @message | sort @timestamp | limit 5"
            in result.stdout
        )

    def test_translate_from_file(self, tmp_path):
        sql_file = tmp_path / "query.sql"
        sql_file.write_text("-- errors per stream\nSELECT count(*) GROUP BY @logStream;\n")

        result = runner.invoke(app, ["query", "translate", "--file", str(sql_file)])

        assert result.exit_code == 0
        assert "stats count(*) by @logStream" in result.stdout

    def test_translate_fallback(self):
        result = runner.invoke(app, ["query", "translate", "--sql", "show me errors"])

        assert result.exit_code == 0
        assert "sort @timestamp desc | limit 20" in result.stdout

    def test_translate_shows_pattern_warnings(self):
        result = runner.invoke(
            app, ["query", "translate", "--sql", "WHERE @message LIKE '%/api/v1%'"]
        )

        assert result.exit_code == 0
        assert "ends the regex early" in result.output

    def test_translate_requires_sql(self):
        result = runner.invoke(app, ["query", "translate"])

        assert result.exit_code == 1
        assert "Provide SQL via --sql or --file" in result.output

    def test_translate_rejects_sql_and_file(self, tmp_path):
        sql_file = tmp_path / "query.sql"
        sql_file.write_text("SELECT @message")

        result = runner.invoke(
            app, ["query", "translate", "--sql", "SELECT 1", "--file", str(sql_file)]
        )

        assert result.exit_code == 1
        assert "not both" in result.output


class TestQueryRun:
    """Tests for query run command."""

    def test_run_mock_json(self):
        result = runner.invoke(
            app,
            [
                "query",
                "run",
                "--source",
                "app-logs",
                "--sql",
                "SELECT @message LIMIT 20",
                "--mock",
                "--output",
                "json",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["row_count"] == 20
        assert data["query"] == "fields @message | limit 20"
        assert data["source"] == "app-logs"

    def test_run_mock_table(self):
        result = runner.invoke(
            app,
            ["query", "run", "--source", "app-logs", "--sql", "SELECT @message", "--mock"],
        )

        assert result.exit_code == 0
        assert "Querying log group: app-logs" in result.output
        assert "Rows: 20" in result.output

    def test_run_json_with_pattern_warning(self):
        result = runner.invoke(
            app,
            [
                "query",
                "run",
                "--source",
                "app-logs",
                "--sql",
                "SELECT @message WHERE @message LIKE '%a.b%'",
                "--mock",
                "-o",
                "json",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["query"] == "filter @message like /a.b/ | fields @message"
        assert "regex metacharacters" in result.stderr

    def test_run_table_keeps_brackets(self):
        result = runner.invoke(
            app,
            [
                "query",
                "run",
                "--source",
                "app-logs",
                "--sql",
                "SELECT @message WHERE @message LIKE '%[bold]x%'",
                "--mock",
            ],
        )

        assert result.exit_code == 0
        assert "like /[bold]x/" in result.stdout

    def test_run_mock_from_settings(self, monkeypatch):
        monkeypatch.setenv("MOCK_MODE", "true")

        result = runner.invoke(
            app,
            ["query", "run", "--source", "app-logs", "--sql", "SELECT @message", "-o", "csv"],
        )

        assert result.exit_code == 0
        assert result.stdout.splitlines()[0] == "@timestamp,@message,@ptr"

    @patch("loglens.cli.query.transport_from_settings")
    @patch("loglens.cli.query.QueryExecutor")
    def test_run_passes_options(self, mock_executor_class, mock_transport_factory):
        mock_executor = MagicMock()
        mock_executor.run_query = AsyncMock(
            return_value=make_result([{"@message": "a"}, {"count": "1"}])
        )
        mock_executor_class.return_value = mock_executor

        result = runner.invoke(
            app,
            [
                "query",
                "run",
                "--source",
                "app-logs",
                "--sql",
                "SELECT @message",
                "--time",
                "custom",
                "--start",
                "2024-01-01T10:00",
                "--end",
                "2024-01-01T11:00",
                "--timeout",
                "30",
                "-o",
                "csv",
            ],
        )

        assert result.exit_code == 0
        kwargs = mock_executor.run_query.await_args.kwargs
        assert kwargs["source"] == "app-logs"
        assert kwargs["timeout_seconds"] == 30
        assert kwargs["selector"].start_local == "2024-01-01T10:00"
        mock_transport_factory.assert_called_once()
        assert mock_executor_class.call_args.kwargs["poll_interval_seconds"] == 0.01
        assert result.stdout.splitlines() == ["@message,count", "a,", ",1"]

    @patch("loglens.cli.query.QueryExecutor")
    def test_run_submit_failed(self, mock_executor_class):
        mock_executor = MagicMock()
        mock_executor.run_query = AsyncMock(
            side_effect=SubmitFailedError("start_query failed: MalformedQueryException")
        )
        mock_executor_class.return_value = mock_executor

        result = runner.invoke(
            app,
            ["query", "run", "--source", "app-logs", "--sql", "SELECT @message", "--mock"],
        )

        assert result.exit_code == 1
        assert "Query failed: start_query failed: MalformedQueryException" in result.output

    @patch("loglens.cli.query.QueryExecutor")
    def test_run_job_failed(self, mock_executor_class):
        mock_executor = MagicMock()
        mock_executor.run_query = AsyncMock(side_effect=JobFailedError("Cancelled", "job-1"))
        mock_executor_class.return_value = mock_executor

        result = runner.invoke(
            app,
            ["query", "run", "--source", "app-logs", "--sql", "SELECT @message", "--mock"],
        )

        assert result.exit_code == 1
        assert "Cancelled" in result.output

    def test_run_inverted_custom_range(self):
        result = runner.invoke(
            app,
            [
                "query",
                "run",
                "--source",
                "app-logs",
                "--sql",
                "SELECT @message",
                "--time",
                "custom",
                "--start",
                "2024-01-02T10:00",
                "--end",
                "2024-01-01T10:00",
                "--mock",
            ],
        )

        assert result.exit_code == 1
        assert "Invalid time range" in result.output

    def test_run_unknown_time_mode(self):
        result = runner.invoke(
            app,
            ["query", "run", "--source", "app-logs", "--sql", "SELECT 1", "--time", "7d"],
        )

        assert result.exit_code == 1
        assert "Unknown time mode" in result.output

    def test_run_invalid_output_format(self):
        result = runner.invoke(
            app,
            ["query", "run", "--source", "app-logs", "--sql", "SELECT 1", "-o", "xml"],
        )

        assert result.exit_code == 1
        assert "Invalid output format" in result.output

    def test_run_requires_source(self):
        result = runner.invoke(app, ["query", "run", "--sql", "SELECT @message"])

        assert result.exit_code != 0

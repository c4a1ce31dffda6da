"""Tests for stream CLI commands."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from loglens.cli.main import app
from loglens.exceptions import TransportError
from loglens.query.models import LogEvent

runner = CliRunner()


class TestStreamFetch:
    """Tests for stream fetch command."""

    def test_fetch_mock_json(self):
        result = runner.invoke(
            app,
            ["stream", "fetch", "--source", "app-logs", "--mock", "--limit", "15", "-o", "json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["event_count"] == 15
        timestamps = [event["timestamp_ms"] for event in data["events"]]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_fetch_uses_default_limit(self, monkeypatch):
        monkeypatch.setenv("STREAM_DEFAULT_LIMIT", "7")

        result = runner.invoke(app, ["stream", "fetch", "--source", "app-logs", "--mock", "-o", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["event_count"] == 7

    def test_fetch_csv(self):
        with patch("loglens.cli.stream.transport_from_settings") as mock_factory:
            transport = MagicMock()
            transport.filter_events = AsyncMock(
                return_value=[
                    LogEvent("e1", 1_000, "older\n", 1_001, "s1"),
                    LogEvent("e2", 2_000, "newer", 2_001, None),
                ]
            )
            mock_factory.return_value = transport

            result = runner.invoke(
                app,
                ["stream", "fetch", "--source", "app-logs", "--pattern", "ERROR", "-o", "csv"],
            )

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "timestamp,stream,message",
            "1970-01-01T00:00:02.000+00:00,,newer",
            "1970-01-01T00:00:01.000+00:00,s1,older",
        ]
        args = transport.filter_events.await_args.args
        assert args[0] == "app-logs"
        assert args[1] == "ERROR"
        assert args[3] - args[2] == 3_600_000

    def test_fetch_upstream_error(self):
        with patch("loglens.cli.stream.transport_from_settings") as mock_factory:
            transport = MagicMock()
            transport.filter_events = AsyncMock(
                side_effect=TransportError("filter_log_events", "AccessDeniedException")
            )
            mock_factory.return_value = transport

            result = runner.invoke(app, ["stream", "fetch", "--source", "app-logs"])

        assert result.exit_code == 1
        assert "Fetch failed: filter_log_events failed: AccessDeniedException" in result.output

    def test_fetch_custom_requires_bounds(self):
        result = runner.invoke(
            app, ["stream", "fetch", "--source", "app-logs", "--time", "custom", "--mock"]
        )

        assert result.exit_code == 1
        assert "requires both start and end" in result.output

    def test_fetch_invalid_timestamp(self):
        result = runner.invoke(
            app,
            [
                "stream",
                "fetch",
                "--source",
                "app-logs",
                "--time",
                "custom",
                "--start",
                "whenever",
                "--end",
                "2024-01-01T10:00",
                "--mock",
            ],
        )

        assert result.exit_code == 1
        assert "Invalid timestamp" in result.output

    def test_fetch_rejects_zero_limit(self):
        result = runner.invoke(
            app, ["stream", "fetch", "--source", "app-logs", "--limit", "0", "--mock"]
        )

        assert result.exit_code != 0

    def test_fetch_table_keeps_brackets(self):
        with patch("loglens.cli.stream.transport_from_settings") as mock_factory:
            transport = MagicMock()
            transport.filter_events = AsyncMock(
                return_value=[LogEvent("e1", 1_000, "[main] started", 1_001, "s1")]
            )
            mock_factory.return_value = transport

            result = runner.invoke(app, ["stream", "fetch", "--source", "app-logs"])

        assert result.exit_code == 0
        assert "[main] started" in result.stdout
        assert "Events: 1" in result.stderr

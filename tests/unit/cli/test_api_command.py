"""Tests for api CLI commands."""

from unittest.mock import MagicMock, patch

import httpx
from typer.testing import CliRunner

from loglens.cli.main import app

runner = CliRunner()


@patch("httpx.get")
def test_status_healthy(mock_get, monkeypatch):
    monkeypatch.setenv("LOGLENS_PORT", "9100")
    response = MagicMock(status_code=200)
    response.json.return_value = {"status": "healthy", "version": "0.1.0", "transport": "mock"}
    mock_get.return_value = response

    result = runner.invoke(app, ["api", "status"])

    assert result.exit_code == 0
    assert mock_get.call_args.args[0] == "http://localhost:9100/health"
    assert "healthy" in result.stdout
    assert "mock" in result.stdout


@patch("httpx.get")
def test_status_unhealthy(mock_get):
    mock_get.return_value = MagicMock(status_code=503)

    result = runner.invoke(app, ["api", "status", "--port", "9000"])

    assert result.exit_code == 1
    assert "status 503" in result.output


@patch("httpx.get", side_effect=httpx.ConnectError("refused"))
def test_status_unreachable(mock_get):
    result = runner.invoke(app, ["api", "status", "--host", "10.0.0.1"])

    assert result.exit_code == 1
    assert "Cannot connect to API server at http://10.0.0.1:8000/health" in result.output


@patch("uvicorn.run")
def test_serve_uses_settings(mock_run, monkeypatch):
    monkeypatch.setenv("LOGLENS_PORT", "9200")

    result = runner.invoke(app, ["api", "serve", "--host", "127.0.0.1"])

    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "loglens.api.app:app",
        host="127.0.0.1",
        port=9200,
        log_level="warning",
        reload=False,
    )

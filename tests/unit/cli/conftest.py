"""Pytest fixtures for CLI tests."""

import pytest

import loglens.config


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at an empty home directory and speed up polling."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0.01")
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    for name in ("MOCK_MODE", "AWS_REGION", "AWS_PROFILE", "QUERY_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    loglens.config.reset_settings()
    yield tmp_path
    loglens.config.reset_settings()

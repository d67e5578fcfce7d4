"""
Shared test fixtures for trello-cli tests.
Patches the config module so no test reads the real .env or hits the API.
"""

import pytest


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Ensure every test starts with a clean config state."""
    from trello_cli import config

    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "API_KEY", "fake-key")
    monkeypatch.setattr(config, "TOKEN", "fake-token")
    monkeypatch.setattr(config, "BASE_URL", "https://api.trello.com")
    monkeypatch.setattr(config, "MATCH_MODE", "glob")
    monkeypatch.setattr(config, "MATCH_WILDCARD", "*")
    monkeypatch.setattr(config, "MATCH_CASE_SENSITIVE", False)
    monkeypatch.setattr(config, "AMBIGUOUS_POLICY", "list")
    monkeypatch.setattr(config, "UPDATE_MAX_RETRIES", 3)
    monkeypatch.setattr(config, "COLOR_ENABLED", False)
    monkeypatch.setattr(config, "STDERR_COLOR_ENABLED", False)
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)

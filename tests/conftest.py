"""Shared fixtures: a Settings object built from a clean environment."""

from __future__ import annotations

import pytest

from config.settings import Settings

_ENV_VARS = (
    "BRAVE_API_KEY",
    "TOGETHER_API_KEY",
    "ANTHROPIC_API_KEY",
    "COMPLETION_PROVIDER",
    "COMPLETION_MODEL",
    "HTTP_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure a developer's real keys never leak into a test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.setenv("BRAVE_API_KEY", "brave-test-key")
    monkeypatch.setenv("TOGETHER_API_KEY", "together-test-key")
    return Settings()

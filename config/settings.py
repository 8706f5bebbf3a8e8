"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate_search()       # raises ConfigurationError if BRAVE_API_KEY is missing
    settings.validate_completion()   # same for the configured completion provider
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from core.errors import ConfigurationError

#: Default completion model per provider.
DEFAULT_MODELS: dict[str, str] = {
    "together": "mistralai/Mixtral-8x7B-Instruct-v0.1",
    "anthropic": "claude-haiku-4-5",
}


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else None


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them with ``monkeypatch.setenv``.
    """

    # ── API Keys ────────────────────────────────────────────────────────────
    brave_api_key: str = field(
        default_factory=lambda: os.environ.get("BRAVE_API_KEY", "")
    )
    together_api_key: str = field(
        default_factory=lambda: os.environ.get("TOGETHER_API_KEY", "")
    )
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "5000"))
    )
    #: Signs the session cookie that holds the saved-gap list.
    secret_key: str = field(
        default_factory=lambda: os.environ.get("SECRET_KEY", "gap-writer-dev")
    )

    # ── Upstream HTTP ───────────────────────────────────────────────────────
    search_url: str = "https://api.search.brave.com/res/v1/web/search"
    completion_url: str = "https://api.together.xyz/v1/completions"
    #: Seconds; ``None`` leaves requests' default (no timeout).
    http_timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("HTTP_TIMEOUT")
    )

    # ── Completion ──────────────────────────────────────────────────────────
    completion_provider: str = field(
        default_factory=lambda: os.environ.get("COMPLETION_PROVIDER", "together").strip().lower()
    )
    completion_model: str = field(
        default_factory=lambda: os.environ.get("COMPLETION_MODEL", "")
    )
    max_tokens: int = 1000
    temperature: float = 0.7

    def __post_init__(self) -> None:
        if not self.completion_model:
            self.completion_model = DEFAULT_MODELS.get(
                self.completion_provider, DEFAULT_MODELS["together"]
            )

    @property
    def completion_api_key(self) -> str:
        """API key for whichever completion provider is configured."""
        if self.completion_provider == "anthropic":
            return self.anthropic_api_key
        return self.together_api_key

    def validate_search(self) -> None:
        """Raise ``ConfigurationError`` if the search key is missing."""
        if not self.brave_api_key:
            raise ConfigurationError("Brave API key is not configured")

    def validate_completion(self) -> None:
        """Raise ``ConfigurationError`` if the completion provider is unusable."""
        if self.completion_provider not in DEFAULT_MODELS:
            raise ConfigurationError(
                f"Unknown completion provider: {self.completion_provider}"
            )
        if not self.completion_api_key:
            name = "Anthropic" if self.completion_provider == "anthropic" else "Together"
            raise ConfigurationError(f"{name} API key is not configured")

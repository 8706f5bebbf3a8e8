"""
Error taxonomy for the relays.

Every failure a route can report is a ``RelayError`` carrying the HTTP status
to answer with and an optional ``details`` string. The web layer turns them
into the JSON envelope ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

from typing import Any, Optional


class RelayError(Exception):
    """Base exception for relay failures."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error envelope for this error."""
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class MissingInputError(RelayError):
    """A required request field was missing or blank."""

    status_code = 400


class ConfigurationError(RelayError):
    """A required API key is not configured."""

    status_code = 500


class UpstreamError(RelayError):
    """The third-party API answered with a non-success status."""


class UnexpectedResponseError(RelayError):
    """The third-party API answered 2xx but not in the expected shape."""

    status_code = 500

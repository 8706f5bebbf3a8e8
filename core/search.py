"""Search relay — forwards a keyword to the Brave Search API.

Responsibilities:
- Reject empty queries and a missing ``BRAVE_API_KEY`` before any network call
- Issue exactly one GET per call (no retries)
- Reshape ``web.results[]`` into ``SearchResult`` objects keyed by list index
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from core.errors import MissingInputError, UpstreamError
from core.models import SearchResult

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

#: Characters encodeURIComponent leaves unescaped.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_search_url(base_url: str, query: str) -> str:
    """Return *base_url* with *query* percent-encoded as the ``q`` parameter.

    Uses the same safe set as JavaScript's ``encodeURIComponent``.
    """
    return f"{base_url}?q={quote(query, safe=_URI_COMPONENT_SAFE)}"


def _to_results(payload: Any) -> list[SearchResult]:
    """Map ``web.results[]``; any missing or mistyped level yields ``[]``."""
    web = payload.get("web") if isinstance(payload, dict) else None
    items = web.get("results") if isinstance(web, dict) else None
    if not isinstance(items, list):
        return []
    return [
        SearchResult(
            id=str(index),
            title=item.get("title") or "",
            url=item.get("url") or "",
            description=item.get("description") or "",
        )
        for index, item in enumerate(items)
        if isinstance(item, dict)
    ]


def search(query: str, settings: Settings) -> list[SearchResult]:
    """Run one Brave web search for *query*.

    Args:
        query: The keyword as typed by the user.
        settings: Application configuration (``brave_api_key``, ``search_url``).

    Returns:
        Results in upstream order, ``id`` being the list index as a string.

    Raises:
        MissingInputError: If the query is empty. Whitespace is forwarded as is.
        ConfigurationError: If no Brave API key is configured.
        UpstreamError: If Brave answers with a non-success status.
        requests.RequestException: On transport failures.
    """
    if not query:
        raise MissingInputError("Query parameter is required")
    settings.validate_search()

    logger.info("Brave search query=%r", query)
    response = requests.get(
        build_search_url(settings.search_url, query),
        headers={
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "X-Subscription-Token": settings.brave_api_key,
        },
        timeout=settings.http_timeout,
    )

    if not response.ok:
        logger.error("Brave Search API error (%d): %s", response.status_code, response.text)
        raise UpstreamError(
            "Failed to fetch search results from Brave",
            status_code=response.status_code,
            details=response.text,
        )

    results = _to_results(response.json())
    logger.info("Brave search complete: %d results", len(results))
    return results

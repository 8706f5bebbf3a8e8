"""
Saved content gaps, held in the user's session.

The store is any mutable mapping (``flask.session`` in the app, a plain dict
in tests). Gaps are kept under ``SESSION_KEY`` as a list of plain dicts so the
session serialiser can handle them. Nothing is written to disk.

The session lives in a signed cookie, and browsers drop cookies over ~4 KB,
so the list is capped both by count and by serialised size.
"""

from __future__ import annotations

import json
import logging
from collections.abc import MutableMapping
from enum import Enum
from typing import Any

from core.models import ContentGap

logger = logging.getLogger(__name__)

SESSION_KEY = "saved_gaps"

#: Most gaps a session may hold.
MAX_SAVED = 20
#: Most bytes the JSON-encoded list may take; leaves room for the cookie's
#: base64 and signature overhead plus flashed messages.
MAX_SAVED_BYTES = 2000


class SaveResult(str, Enum):
    """Outcome of ``save_gap``."""

    SAVED = "saved"
    DUPLICATE = "duplicate"
    FULL = "full"


def _encoded_size(items: list[dict[str, Any]]) -> int:
    return len(json.dumps(items, separators=(",", ":")).encode("utf-8"))


def get_saved(store: MutableMapping[str, Any]) -> list[ContentGap]:
    """Return the saved gaps in the order they were saved."""
    return [ContentGap.model_validate(item) for item in store.get(SESSION_KEY, [])]


def save_gap(store: MutableMapping[str, Any], gap: ContentGap) -> SaveResult:
    """Append *gap* unless it is a duplicate or the list is full.

    A gap is a duplicate when a saved gap has the same text. The list is full
    when it already holds ``MAX_SAVED`` gaps or adding *gap* would push it
    past ``MAX_SAVED_BYTES``; the store is left untouched in both cases.
    """
    items = list(store.get(SESSION_KEY, []))
    if any(item["gap"] == gap.gap for item in items):
        return SaveResult.DUPLICATE

    candidate = items + [gap.model_dump()]
    if len(candidate) > MAX_SAVED or _encoded_size(candidate) > MAX_SAVED_BYTES:
        logger.info("Saved list full (%d saved), rejected %r", len(items), gap.gap)
        return SaveResult.FULL

    # Reassign so flask.session notices the change.
    store[SESSION_KEY] = candidate
    logger.info("Saved gap %r (%d saved)", gap.gap, len(candidate))
    return SaveResult.SAVED


def remove_gap(store: MutableMapping[str, Any], text: str) -> bool:
    """Remove the saved gap whose text is *text*.

    Returns:
        ``True`` if a gap was removed, ``False`` if none matched.
    """
    items = list(store.get(SESSION_KEY, []))
    remaining = [item for item in items if item["gap"] != text]
    if len(remaining) == len(items):
        return False
    store[SESSION_KEY] = remaining
    return True


def clear(store: MutableMapping[str, Any]) -> None:
    """Forget every saved gap."""
    store.pop(SESSION_KEY, None)

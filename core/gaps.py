"""Content-gap suggestions for a search keyword.

The suggestions are not derived from any content analysis. A seed computed
from the query's character codes picks an adjective, a content type and a
score for each of five phrase templates, so the same query always produces
the same ordered list.

Example:
    >>> generate_gaps("seo")[0]
    ContentGap(gap='templates about professional seo', score=9)
"""

from __future__ import annotations

import logging

from core.models import ContentGap

logger = logging.getLogger(__name__)

#: Number of suggestions produced per query.
GAP_COUNT = 5

#: Adjectives combined with the query.
BASE_KEYWORDS: tuple[str, ...] = (
    "beginners guide to",
    "advanced strategies for",
    "affordable",
    "premium",
    "sustainable",
    "quick",
    "comprehensive",
    "ultimate",
    "budget-friendly",
    "professional",
)

#: Content formats combined with the query.
CONTENT_TYPES: tuple[str, ...] = (
    "guide",
    "tutorial",
    "tips",
    "strategies",
    "examples",
    "case studies",
    "tools",
    "resources",
    "checklist",
    "templates",
)


def query_seed(query: str) -> int:
    """Sum of the query's UTF-16 code units.

    Matches how browsers count characters, so an astral character such as an
    emoji contributes both halves of its surrogate pair.
    """
    data = query.encode("utf-16-le")
    return sum(
        int.from_bytes(data[pos:pos + 2], "little") for pos in range(0, len(data), 2)
    )


def _pick(seed: int, low: int, high: int, offset: int) -> int:
    """Deterministic integer in ``[low, high]`` for ``seed + offset``."""
    return low + ((seed + offset) % (high - low + 1))


def _phrase(index: int, keyword: str, content_type: str, query: str) -> str:
    variant = index % 3
    if variant == 0:
        return f"{keyword} {query} {content_type}"
    if variant == 1:
        return f"{query} {content_type} for {keyword.replace(' for', '', 1)}"
    return f"{content_type} about {keyword} {query}"


def generate_gaps(query: str) -> list[ContentGap]:
    """Return five content gaps for *query*, highest score first.

    Args:
        query: The search keyword, used verbatim in every phrase. An empty
            string is allowed and yields seed 0.

    Returns:
        Exactly ``GAP_COUNT`` gaps with scores in ``[5, 9]``. Equal scores
        keep their generation order.
    """
    seed = query_seed(query)

    gaps: list[ContentGap] = []
    for i in range(GAP_COUNT):
        keyword = BASE_KEYWORDS[_pick(seed, 0, len(BASE_KEYWORDS) - 1, i)]
        content_type = CONTENT_TYPES[_pick(seed, 0, len(CONTENT_TYPES) - 1, i + 10)]
        score = _pick(seed, 5, 9, i + 20)
        gaps.append(ContentGap(gap=_phrase(i, keyword, content_type, query), score=score))

    # sorted() is stable
    gaps = sorted(gaps, key=lambda g: g.score, reverse=True)
    logger.debug("Generated %d gaps for query=%r seed=%d", len(gaps), query, seed)
    return gaps

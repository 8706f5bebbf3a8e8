"""
Pydantic models shared across the Gap Writer core.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """A single web result returned by the search relay."""

    id: str
    title: str = ""
    url: str = ""
    description: str = ""


class ContentGap(BaseModel):
    """A synthesized topic suggestion with a heuristic score out of 10."""

    gap: str
    score: int = Field(ge=5, le=9)


class BlogPost(BaseModel):
    """A generated blog post draft; ``content`` is Markdown."""

    topic: str
    content: str

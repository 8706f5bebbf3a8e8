"""
Blog post writer for Gap Writer.

Sends a fixed Neil Patel-style prompt for a topic to a completion API and
returns the generated Markdown as a ``BlogPost``.

Providers
─────────
together   (default) POST /v1/completions over ``requests``;
           the text lives at ``choices[0].text``
anthropic  Messages API through the ``anthropic`` SDK;
           the text lives in the first text content block

Each call makes at most one outbound request. Nothing is retried or streamed.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

import anthropic
import requests

from core.errors import MissingInputError, UnexpectedResponseError, UpstreamError
from core.models import BlogPost

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    'Write a comprehensive Neil Patel-style blog post about "{topic}".\n'
    "Include an introduction, why it matters, key strategies, common mistakes, "
    "and a conclusion.\n"
    "Format the post in Markdown with headers and bullet points where appropriate."
)


def build_prompt(topic: str) -> str:
    """Return the completion prompt for *topic*."""
    return PROMPT_TEMPLATE.format(topic=topic)


def _key_hint(key: str) -> str:
    return key[:5] + "..."


# ── Response parsing ───────────────────────────────────────────────────────

def extract_completion_text(data: Any) -> Optional[str]:
    """Return ``choices[0].text`` from a completions body, or ``None``.

    Empty text counts as missing.
    """
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    if not isinstance(text, str) or not text:
        return None
    return text


# ── Providers ──────────────────────────────────────────────────────────────

def _complete_together(prompt: str, settings: Settings) -> str:
    response = requests.post(
        settings.completion_url,
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.together_api_key}",
        },
        json={
            "model": settings.completion_model,
            "prompt": prompt,
            "max_tokens": settings.max_tokens,
            "temperature": settings.temperature,
        },
        timeout=settings.http_timeout,
    )

    if not response.ok:
        logger.error("Together AI API error (%d): %s", response.status_code, response.text)
        raise UpstreamError(
            "Failed to generate blog post",
            status_code=response.status_code,
            details=response.text,
        )

    data = response.json()
    text = extract_completion_text(data)
    if text is None:
        raw = json.dumps(data)
        logger.error("Unexpected API response structure: %s", raw)
        raise UnexpectedResponseError("Unexpected API response structure", details=raw)
    return text


def _complete_anthropic(prompt: str, settings: Settings) -> str:
    # max_retries=0: one outbound call per request
    options: dict[str, Any] = {"api_key": settings.anthropic_api_key, "max_retries": 0}
    if settings.http_timeout is not None:
        options["timeout"] = settings.http_timeout
    client = anthropic.Anthropic(**options)
    try:
        message = client.messages.create(
            model=settings.completion_model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APIStatusError as exc:
        logger.error("Anthropic API error (%d): %s", exc.status_code, exc.message)
        raise UpstreamError(
            "Failed to generate blog post",
            status_code=exc.status_code,
            details=exc.response.text,
        ) from exc

    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "text" and getattr(block, "text", ""):
            return block.text

    raw = message.model_dump_json() if hasattr(message, "model_dump_json") else repr(message)
    logger.error("Unexpected API response structure: %s", raw)
    raise UnexpectedResponseError("Unexpected API response structure", details=raw)


_PROVIDERS = {
    "together": _complete_together,
    "anthropic": _complete_anthropic,
}


# ── Public API ─────────────────────────────────────────────────────────────

def generate_blog_post(topic: str, settings: Settings) -> BlogPost:
    """Generate a Markdown blog post draft about *topic*.

    Args:
        topic: The content gap or keyword to write about.
        settings: Application configuration; selects the provider and key.

    Returns:
        A ``BlogPost`` holding the topic and the generated Markdown.

    Raises:
        MissingInputError: If the topic is empty. Whitespace is forwarded as is.
        ConfigurationError: If the provider's API key is missing.
        UpstreamError: If the provider answers with a non-success status.
        UnexpectedResponseError: If the success body has no completion text.
    """
    if not topic:
        raise MissingInputError("Topic is required")
    settings.validate_completion()

    logger.info("Generating blog post for topic=%r", topic)
    logger.info(
        "Using %s API key: %s",
        settings.completion_provider,
        _key_hint(settings.completion_api_key),
    )

    complete = _PROVIDERS[settings.completion_provider]
    content = complete(build_prompt(topic), settings)

    logger.info("Blog post generated successfully (%d chars)", len(content))
    return BlogPost(topic=topic, content=content)

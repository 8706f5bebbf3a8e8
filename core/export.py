"""Markdown download and HTML rendering for generated posts."""

from __future__ import annotations

import html
import re
from urllib.parse import urlsplit
from xml.etree.ElementTree import Element

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

_WHITESPACE = re.compile(r"\s+")
_CONTROL_AND_SPACE = re.compile(r"[\x00-\x20\x7f]+")

#: URL schemes a rendered link or image may point at; "" covers relative URLs.
SAFE_SCHEMES = frozenset({"", "http", "https", "mailto"})


def markdown_filename(topic: str) -> str:
    """File name for downloading a post about *topic*.

    Whitespace runs become a single ``-`` and the result is lower-cased:

        >>> markdown_filename("Eco Travel  Tips")
        'eco-travel-tips.md'
    """
    return f"{_WHITESPACE.sub('-', topic).lower()}.md"


def is_safe_url(url: str) -> bool:
    """True if *url* uses one of ``SAFE_SCHEMES``.

    Entities and embedded whitespace are resolved first, the way a browser
    reads the attribute, so ``java&#x09;script:`` is still caught.
    """
    normalized = _CONTROL_AND_SPACE.sub("", html.unescape(url)).lower()
    try:
        scheme = urlsplit(normalized).scheme
    except ValueError:
        return False
    return scheme in SAFE_SCHEMES


class _SafeLinkTreeprocessor(Treeprocessor):
    def run(self, root: Element) -> None:
        for element in root.iter():
            for attr in ("href", "src"):
                value = element.get(attr)
                if value is not None and not is_safe_url(value):
                    del element.attrib[attr]


class SafeLinkExtension(Extension):
    """Drop ``href``/``src`` attributes whose scheme is not allowed."""

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        # Below "inline" (20) so links and images already exist.
        md.treeprocessors.register(_SafeLinkTreeprocessor(md), "safe_links", 5)


def render_html(markdown_text: str) -> str:
    """Render a generated post to HTML for the blog page.

    Raw HTML in the model output is shown as text, never passed through, and
    links are limited to ``SAFE_SCHEMES``.
    """
    md = markdown.Markdown(extensions=["extra", "sane_lists", SafeLinkExtension()])
    md.preprocessors.deregister("html_block", strict=False)
    md.inlinePatterns.deregister("html", strict=False)
    return md.convert(markdown_text)

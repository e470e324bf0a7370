"""Markdown rendering for posts and comments."""

from __future__ import annotations

import bleach
from markdown_it import MarkdownIt

# CommonMark with single newlines turned into <br>.
md = MarkdownIt("commonmark", {"breaks": True})

ALLOWED_TAGS = [
    "p", "br", "strong", "em", "code", "pre", "blockquote", "hr",
    "ul", "ol", "li", "a", "h1", "h2", "h3", "h4", "h5", "h6",
]
ALLOWED_ATTRS = {"a": ["href", "title", "rel"]}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]


def render_markdown(text: str) -> str:
    """Render ``text`` to HTML that is safe to embed in a page."""
    html = md.render(text or "")
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )

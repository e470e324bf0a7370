# tests/test_markdown.py
"""Tests for markdown rendering and sanitising."""

from __future__ import annotations

import pytest

from neor.services.markdown import render_markdown


def test_markdown_renders_commonmark() -> None:
    html = render_markdown("Hello *world*\nnext line\n\n- item")
    assert "<em>world</em>" in html
    assert "<br" in html
    assert "<li>item</li>" in html


@pytest.mark.parametrize(
    "source",
    [
        "<script>alert(1)</script>",
        "<img src=x onerror=alert(1)>",
        "<a href=\"javascript:alert(1)\">click</a>",
    ],
)
def test_markdown_strips_unsafe_html(source: str) -> None:
    html = render_markdown(source)
    assert "<script" not in html
    assert "onerror" not in html
    assert "javascript:" not in html

"""Host integration: Markdown fences, HTML processing, and stylesheets."""

from __future__ import annotations

from .markdown import AnnotatedFenceExtension, markdown_to_html, render_markdown
from .processor import INLINE_CLASS, PROCESSED_CLASS, CodeProcessor
from .stylesheet import build_stylesheet


__all__ = [
    "INLINE_CLASS",
    "PROCESSED_CLASS",
    "AnnotatedFenceExtension",
    "CodeProcessor",
    "build_stylesheet",
    "markdown_to_html",
    "render_markdown",
]

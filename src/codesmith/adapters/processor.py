"""Discover code fragments in an HTML document and highlight them in place.

Blocks are ``pre > code`` elements. Their annotation is read from the
``data-annotation`` attribute written by
:class:`~codesmith.adapters.markdown.AnnotatedFenceExtension`, falling back to
a ``language-*`` class. Every processed block keeps its source and parsed
configuration on the element so that :meth:`CodeProcessor.refresh_all` can
re-render it after a settings or theme change.

Inline fragments are ``code`` elements outside ``pre`` whose text uses one of
the shorthand forms recognised by :func:`~codesmith.core.parser.parse_inline`.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
import json
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup
from bs4.element import Tag

from codesmith.core.config import BlockConfig
from codesmith.core.diagnostics import DiagnosticEmitter
from codesmith.core.dom import add_class, gather_classes, has_class
from codesmith.core.languages import normalize_language
from codesmith.core.parser import (
    parse_annotation_details,
    parse_inline,
    sanitize_config,
    validate_config,
)
from codesmith.highlight.structure import HTML_PARSER


if TYPE_CHECKING:  # pragma: no cover - typing only
    from codesmith.core.settings import HighlightSettings
    from codesmith.highlight.pipeline import HighlightPipeline


PROCESSED_CLASS = "codesmith-processed"
INLINE_CLASS = "codesmith-inline"
_LANGUAGE_PREFIXES = ("language-", "lang-")


def annotation_for(code: Tag) -> str:
    """Return the annotation attached to a ``code`` element."""
    annotation = code.get("data-annotation")
    if isinstance(annotation, str) and annotation.strip():
        return annotation
    for css_class in gather_classes(code.get("class")):
        for prefix in _LANGUAGE_PREFIXES:
            if css_class.startswith(prefix) and len(css_class) > len(prefix):
                return css_class[len(prefix) :]
    return ""


class CodeProcessor:
    """Apply a :class:`HighlightPipeline` to every fragment of a document."""

    def __init__(
        self,
        pipeline: HighlightPipeline,
        *,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.emitter = emitter or pipeline.emitter

    @property
    def settings(self) -> HighlightSettings:
        return self.pipeline.settings

    def resolve_config(self, annotation: str, code: str) -> BlockConfig:
        """Parse ``annotation`` into a valid configuration for ``code``."""
        result = parse_annotation_details(annotation)
        for warning in result.warnings:
            self.emitter.debug("Annotation %r: %s", annotation, warning)
        config = result.config
        if not validate_config(config):
            config = sanitize_config(config)
        if not annotation.strip() and self.settings.auto_detect_language:
            detect = getattr(self.pipeline.engine, "detect_language", None)
            detected = detect(code) if callable(detect) else None
            if detected:
                self.emitter.debug("Detected language %s for unannotated block", detected)
                config = replace(config, language=normalize_language(detected))
        return config

    async def render_block(self, pre: Tag, code: str, config: BlockConfig) -> Tag | None:
        """Render ``code`` and swap the result in place of ``pre``."""
        block = await self.pipeline.render(code, config.language, config)
        rendered = block.to_soup().find("pre")
        if not isinstance(rendered, Tag):
            return None
        add_class(rendered, PROCESSED_CLASS)
        rendered["data-original-code"] = code
        rendered["data-language"] = config.language
        rendered["data-config"] = json.dumps(config.describe(), separators=(",", ":"))
        if block.fallback is not None:
            rendered["data-fallback"] = block.fallback.value
        pre.replace_with(rendered)
        return rendered

    async def process_code_blocks(self, soup: BeautifulSoup | Tag) -> int:
        """Highlight every unprocessed block; return how many were rendered."""
        count = 0
        for pre in list(soup.find_all("pre")):
            if not isinstance(pre, Tag) or has_class(pre, PROCESSED_CLASS):
                continue
            code_tag = pre.find("code")
            if not isinstance(code_tag, Tag):
                continue
            code = code_tag.get_text()
            try:
                config = self.resolve_config(annotation_for(code_tag), code)
                rendered = await self.render_block(pre, code, config)
            except Exception as exc:
                self.emitter.error("Failed to process code block", exc)
                continue
            if rendered is not None:
                count += 1
        return count

    async def process_inline_code(self, soup: BeautifulSoup | Tag) -> int:
        """Highlight inline shorthand fragments; return how many were rendered."""
        if not self.settings.enable_inline_highlight:
            return 0
        count = 0
        for code_tag in list(soup.find_all("code")):
            if not isinstance(code_tag, Tag) or has_class(code_tag, INLINE_CLASS):
                continue
            if code_tag.find_parent("pre") is not None:
                continue
            inline = parse_inline(code_tag.get_text())
            if inline is None:
                continue
            try:
                markup = await self.pipeline.highlight_inline(inline.code, inline.language)
            except Exception as exc:
                self.emitter.error("Failed to process inline code", exc)
                continue
            fragment = BeautifulSoup(markup, HTML_PARSER)
            code_tag.clear()
            for node in list(fragment.contents):
                code_tag.append(node.extract())
            add_class(code_tag, INLINE_CLASS)
            code_tag["data-language"] = inline.language
            count += 1
        return count

    async def _refresh_block(self, pre: Tag) -> bool:
        code = pre.get("data-original-code")
        if not isinstance(code, str):
            return False
        try:
            raw = pre.get("data-config")
            data = json.loads(raw) if isinstance(raw, str) else {}
            config = sanitize_config(BlockConfig.from_mapping(data))
            return await self.render_block(pre, code, config) is not None
        except Exception as exc:
            self.emitter.error("Failed to refresh code block", exc)
            return False

    async def refresh_all(self, soup: BeautifulSoup | Tag) -> int:
        """Re-render every processed block; return how many succeeded."""
        blocks = [
            pre
            for pre in soup.find_all("pre")
            if isinstance(pre, Tag) and has_class(pre, PROCESSED_CLASS)
        ]
        results = await asyncio.gather(*(self._refresh_block(pre) for pre in blocks))
        return sum(1 for refreshed in results if refreshed)

    async def process_html(self, html: str) -> str:
        """Highlight blocks and inline fragments of an HTML document."""
        soup = BeautifulSoup(html, HTML_PARSER)
        await self.process_code_blocks(soup)
        await self.process_inline_code(soup)
        return soup.decode()


__all__ = [
    "INLINE_CLASS",
    "PROCESSED_CLASS",
    "CodeProcessor",
    "annotation_for",
]

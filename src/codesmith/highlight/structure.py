"""Rendered block values and engine-independent structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from html import escape

from bs4 import BeautifulSoup

from codesmith.core.dom import LINE_CLASS, code_element
from codesmith.core.languages import PLAIN_TEXT


HTML_PARSER = "html.parser"
BLOCK_CLASS = "codesmith"


class FallbackLevel(str, Enum):
    """Degraded rendering strategies used when highlighting fails."""

    PLAIN_LANGUAGE = "plain-language"
    MINIMAL = "minimal"


@dataclass(frozen=True, slots=True)
class RenderedBlock:
    """Markup produced for one fragment.

    The value is immutable so it can be shared through the cache; call
    :meth:`to_soup` to obtain a tree that can be freely modified.
    """

    html: str
    language: str
    theme: str
    requested_language: str
    fallback: FallbackLevel | None = None
    passes: tuple[str, ...] = ()

    @property
    def is_fallback(self) -> bool:
        return self.fallback is not None

    def to_soup(self) -> BeautifulSoup:
        """Parse the markup into a fresh BeautifulSoup tree."""
        return BeautifulSoup(self.html, HTML_PARSER)

    def __str__(self) -> str:
        return self.html


def split_source_lines(code: str) -> list[str]:
    """Split ``code`` into lines, ignoring the terminating newline."""
    lines = code.replace("\r\n", "\n").split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def build_plain_structure(
    code: str, *, language: str = PLAIN_TEXT, theme: str | None = None
) -> BeautifulSoup:
    """Build an unstyled block without involving any highlighting engine."""
    soup = BeautifulSoup("", HTML_PARSER)
    pre = soup.new_tag("pre", attrs={"class": f"{BLOCK_CLASS} {BLOCK_CLASS}-plain"})
    pre["data-language"] = language
    if theme:
        pre["data-theme"] = theme
    code_tag = soup.new_tag("code")
    pre.append(code_tag)
    for index, text in enumerate(split_source_lines(code)):
        if index:
            code_tag.append("\n")
        line = soup.new_tag("span", attrs={"class": LINE_CLASS})
        if text:
            line.append(text)
        code_tag.append(line)
    soup.append(pre)
    return soup


def extract_inline_markup(soup: BeautifulSoup) -> str | None:
    """Return the inner markup of the block's ``code`` element."""
    code = code_element(soup)
    if code is None:
        return None
    return code.decode_contents()


def plain_inline_markup(code: str) -> str:
    """Escape ``code`` for use as inline HTML."""
    return escape(code, quote=False)


__all__ = [
    "BLOCK_CLASS",
    "HTML_PARSER",
    "FallbackLevel",
    "RenderedBlock",
    "build_plain_structure",
    "extract_inline_markup",
    "plain_inline_markup",
    "split_source_lines",
]

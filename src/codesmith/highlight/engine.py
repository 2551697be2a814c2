"""Highlighting engine capability and its Pygments implementation.

The pipeline talks to engines through :class:`HighlightEngine`. Engines must
have a language and a theme loaded before they can render with them, and they
report failures with :class:`~codesmith.core.exceptions.EngineError` carrying
an :class:`~codesmith.core.exceptions.EngineErrorKind` so callers never have
to inspect error messages.

:class:`PygmentsEngine` maps languages to Pygments lexers and themes to
Pygments styles and produces the following structure::

    <pre class="codesmith" data-language="python" data-theme="monokai"
         style="background-color:#272822;color:#f8f8f2">
      <code><span class="line"><span style="color:#66d9ef">def</span> ...</span>
    <span class="line">...</span></code>
    </pre>
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from bs4 import BeautifulSoup
from bs4.element import Tag
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_all_lexers, get_lexer_by_name, guess_lexer
from pygments.style import Style
from pygments.styles import get_all_styles, get_style_by_name
from pygments.token import Token, _TokenType
from pygments.util import ClassNotFound

from codesmith.core.dom import LINE_CLASS
from codesmith.core.exceptions import EngineError, EngineErrorKind
from codesmith.core.languages import PLAIN_TEXT

from .structure import BLOCK_CLASS, HTML_PARSER


ENGINE_LANGUAGE_ALIASES = {
    "shell": "bash",
    "sh": "bash",
    "zsh": "bash",
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "yml": "yaml",
    "md": "markdown",
    "vue": "html",
    "svelte": "html",
    "angular": "typescript",
    "react": "jsx",
    "plaintext": PLAIN_TEXT,
    "txt": PLAIN_TEXT,
}


@runtime_checkable
class HighlightEngine(Protocol):
    """Tokenizer/theme capability consumed by the pipeline."""

    async def load_language(self, language: str) -> None: ...

    async def load_theme(self, theme: str) -> None: ...

    async def render(self, code: str, language: str, theme: str) -> BeautifulSoup: ...

    def available_languages(self) -> list[str]: ...

    def available_themes(self) -> list[str]: ...


def _lexer_options() -> dict[str, object]:
    return {"stripnl": False, "ensurenl": False}


class PygmentsEngine:
    """Highlight code with Pygments lexers and styles."""

    def __init__(self) -> None:
        self._lexers: dict[str, Lexer] = {PLAIN_TEXT: TextLexer(**_lexer_options())}
        self._styles: dict[str, type[Style]] = {}
        self._css: dict[tuple[str, _TokenType], str] = {}

    async def load_language(self, language: str) -> None:
        if language in self._lexers:
            return
        try:
            lexer = get_lexer_by_name(language, **_lexer_options())
        except ClassNotFound as exc:
            raise EngineError(
                EngineErrorKind.LANGUAGE_UNUSABLE, f"Language '{language}' is not supported"
            ) from exc
        self._lexers[language] = lexer

    async def load_theme(self, theme: str) -> None:
        if theme in self._styles:
            return
        try:
            self._styles[theme] = get_style_by_name(theme)
        except ClassNotFound as exc:
            raise EngineError(
                EngineErrorKind.THEME_NOT_FOUND, f"Theme '{theme}' not found"
            ) from exc

    async def render(self, code: str, language: str, theme: str) -> BeautifulSoup:
        lexer = self._lexers.get(language)
        if lexer is None:
            raise EngineError(
                EngineErrorKind.LANGUAGE_UNUSABLE, f"Language '{language}' is not loaded"
            )
        style = self._styles.get(theme)
        if style is None:
            raise EngineError(EngineErrorKind.THEME_NOT_FOUND, f"Theme '{theme}' not found")
        try:
            tokens = list(lexer.get_tokens(code))
        except Exception as exc:
            raise EngineError(
                EngineErrorKind.OTHER, f"Lexer '{language}' failed: {exc}"
            ) from exc
        return self._build(tokens, code, style, language=language, theme=theme)

    def detect_language(self, code: str) -> str | None:
        """Guess the language of ``code``; ``None`` when nothing fits."""
        if not code.strip():
            return None
        try:
            lexer = guess_lexer(code)
        except ClassNotFound:
            return None
        if isinstance(lexer, TextLexer) or not lexer.aliases:
            return None
        return lexer.aliases[0]

    def available_languages(self) -> list[str]:
        return sorted({aliases[0] for _, aliases, _, _ in get_all_lexers() if aliases})

    def available_themes(self) -> list[str]:
        return sorted(get_all_styles())

    @property
    def loaded_languages(self) -> frozenset[str]:
        return frozenset(self._lexers)

    @property
    def loaded_themes(self) -> frozenset[str]:
        return frozenset(self._styles)

    def _token_css(self, style: type[Style], theme: str, token_type: _TokenType) -> str:
        key = (theme, token_type)
        cached = self._css.get(key)
        if cached is not None:
            return cached
        info = style.style_for_token(token_type)
        rules: list[str] = []
        if info.get("color"):
            rules.append(f"color:#{info['color']}")
        if info.get("bgcolor"):
            rules.append(f"background-color:#{info['bgcolor']}")
        if info.get("bold"):
            rules.append("font-weight:bold")
        if info.get("italic"):
            rules.append("font-style:italic")
        if info.get("underline"):
            rules.append("text-decoration:underline")
        css = ";".join(rules)
        self._css[key] = css
        return css

    def _build(
        self,
        tokens: Iterable[tuple[_TokenType, str]],
        code: str,
        style: type[Style],
        *,
        language: str,
        theme: str,
    ) -> BeautifulSoup:
        soup = BeautifulSoup("", HTML_PARSER)
        pre = soup.new_tag("pre", attrs={"class": BLOCK_CLASS})
        pre["data-language"] = language
        pre["data-theme"] = theme
        root_rules = []
        if style.background_color:
            root_rules.append(f"background-color:{style.background_color}")
        foreground = style.style_for_token(Token.Text).get("color")
        if foreground:
            root_rules.append(f"color:#{foreground}")
        if root_rules:
            pre["style"] = ";".join(root_rules)
        pre["tabindex"] = "0"
        code_tag = soup.new_tag("code")
        pre.append(code_tag)
        soup.append(pre)

        lines: list[list[tuple[_TokenType, str]]] = [[]]
        for token_type, value in tokens:
            parts = value.split("\n")
            for index, part in enumerate(parts):
                if index:
                    lines.append([])
                if part:
                    lines[-1].append((token_type, part))
        if len(lines) > 1 and not lines[-1] and code.endswith("\n"):
            lines.pop()

        for index, line_tokens in enumerate(lines):
            if index:
                code_tag.append("\n")
            line = soup.new_tag("span", attrs={"class": LINE_CLASS})
            for token_type, value in line_tokens:
                css = self._token_css(style, theme, token_type)
                if css:
                    span: Tag = soup.new_tag("span", attrs={"style": css})
                    span.string = value
                    line.append(span)
                else:
                    line.append(value)
            code_tag.append(line)
        return soup


__all__ = [
    "ENGINE_LANGUAGE_ALIASES",
    "HighlightEngine",
    "PygmentsEngine",
]

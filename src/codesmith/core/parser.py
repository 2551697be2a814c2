"""Parse code fence annotations into :class:`BlockConfig` values.

An annotation is the free-form text following the opening fence::

    ```python hl:1,3-5 ln:10 title:"My Script" fold

The first token names the language; every following token is an independent
directive. Parsing never raises: malformed directives are reported as
:class:`DirectiveOutcome` entries with a ``skipped`` status and the rest of the
annotation is still honoured. Unknown directives are ignored so that older
releases keep accepting annotations written for newer ones.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
import logging
import math
import re

from .config import TITLE_MAX_LENGTH, BlockConfig
from .languages import PLAIN_TEXT, normalize_language


logger = logging.getLogger(__name__)

_QUOTES = frozenset({'"', "'"})
_RANGE = re.compile(r"^(?P<start>\d+)\s*-\s*(?P<end>\d+)$")
_NUMBER = re.compile(r"^\d+$")
_SIGNED_NUMBER = re.compile(r"^[+-]?\d+$")
_ESCAPE = re.compile(r"""\\(["'\\nt])""")
_ESCAPES = {'"': '"', "'": "'", "\\": "\\", "n": "\n", "t": "\t"}

_INLINE_PATTERNS = (
    re.compile(r"\{(?P<lang>\w+)\}\s*(?P<code>.+)"),
    re.compile(r"(?P<lang>\w+):\s*(?P<code>.+)"),
    re.compile(r"\[(?P<lang>\w+)\]\s*(?P<code>.+)"),
)


class DirectiveStatus(Enum):
    """Outcome of a single annotation directive."""

    APPLIED = "applied"
    IGNORED = "ignored"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class DirectiveOutcome:
    """Record describing how one directive token was handled."""

    token: str
    status: DirectiveStatus
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Parsed configuration plus a per-directive report."""

    config: BlockConfig
    outcomes: tuple[DirectiveOutcome, ...] = ()

    @property
    def warnings(self) -> list[str]:
        """Human readable messages for skipped directives."""
        return [
            f"{outcome.token}: {outcome.reason}"
            for outcome in self.outcomes
            if outcome.status is DirectiveStatus.SKIPPED
        ]


@dataclass(frozen=True, slots=True)
class InlineCode:
    """Language and payload extracted from an inline code span."""

    language: str
    code: str


class DirectiveError(ValueError):
    """Raised internally when a directive value cannot be interpreted."""


def split_annotation(annotation: str) -> list[str]:
    """Split ``annotation`` on whitespace, keeping quoted spans together.

    Quote characters are preserved in the resulting tokens; a backslash inside
    a quoted span escapes the next character, so an escaped quote does not
    terminate the span while an escaped backslash does not escape the quote.
    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escaped = False

    for char in annotation:
        if escaped:
            escaped = False
            current.append(char)
        elif quote is not None and char == "\\":
            escaped = True
            current.append(char)
        elif quote is None and char in _QUOTES:
            quote = char
            current.append(char)
        elif quote is not None and char == quote:
            quote = None
            current.append(char)
        elif quote is None and char.isspace():
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))
    return [token for token in (item.strip() for item in tokens) if token]


def parse_highlight_ranges(value: str) -> tuple[int, ...]:
    """Expand ``1,3-5`` style ranges into sorted line numbers.

    Fragments that are not positive numbers or ascending ranges are skipped.
    """
    lines: set[int] = set()
    for fragment in value.split(","):
        fragment = fragment.strip()
        if not fragment:
            continue
        if match := _RANGE.match(fragment):
            start, end = int(match.group("start")), int(match.group("end"))
            if start > 0 and end >= start:
                lines.update(range(start, end + 1))
            else:
                logger.debug("Ignoring invalid highlight range %r", fragment)
            continue
        if _NUMBER.match(fragment) and int(fragment) > 0:
            lines.add(int(fragment))
            continue
        logger.debug("Ignoring invalid highlight fragment %r", fragment)
    return tuple(sorted(lines))


def unquote(value: str) -> str:
    """Strip matching surrounding quotes and resolve escape sequences."""
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1]
    return _ESCAPE.sub(lambda match: _ESCAPES[match.group(1)], value)


def _apply_directive(token: str, fields: dict[str, object]) -> DirectiveStatus:
    if token.startswith("hl:"):
        lines = parse_highlight_ranges(token[3:])
        if not lines:
            raise DirectiveError("no valid line numbers")
        fields["highlight_lines"] = lines
    elif token.startswith("ln:"):
        value = token[3:]
        if value == "true":
            fields["show_line_numbers"] = True
        elif value == "false":
            fields["show_line_numbers"] = False
        elif _SIGNED_NUMBER.match(value):
            fields["show_line_numbers"] = True
            fields["start_line_number"] = max(1, int(value))
        else:
            raise DirectiveError(f"expected true, false or a line number, got {value!r}")
    elif token == "ln":
        fields["show_line_numbers"] = True
    elif token.startswith(("title:", "file:")):
        fields["title"] = unquote(token.split(":", 1)[1])
    elif token.startswith("filename:"):
        fields["filename"] = unquote(token[len("filename:") :])
    elif token.startswith("theme:"):
        theme = unquote(token[len("theme:") :]).strip()
        if not theme:
            raise DirectiveError("empty theme name")
        fields["custom_theme"] = theme
    elif token in {"fold", "unfold", "exclude"}:
        fields[token] = True
    else:
        return DirectiveStatus.IGNORED
    return DirectiveStatus.APPLIED


def parse_annotation_details(annotation: str) -> ParseResult:
    """Parse ``annotation`` and report what happened to every directive."""
    if not isinstance(annotation, str):
        return ParseResult(BlockConfig())

    tokens = split_annotation(annotation)
    if not tokens:
        return ParseResult(BlockConfig())

    fields: dict[str, object] = {"language": normalize_language(tokens[0])}
    outcomes: list[DirectiveOutcome] = []
    for token in tokens[1:]:
        try:
            status = _apply_directive(token, fields)
        except ValueError as exc:
            logger.debug("Skipping code block directive %r: %s", token, exc)
            outcomes.append(DirectiveOutcome(token, DirectiveStatus.SKIPPED, str(exc)))
        else:
            outcomes.append(DirectiveOutcome(token, status))

    return ParseResult(BlockConfig(**fields), tuple(outcomes))  # type: ignore[arg-type]


def parse_annotation(annotation: str) -> BlockConfig:
    """Return the :class:`BlockConfig` described by ``annotation``."""
    return parse_annotation_details(annotation).config


def _is_line_number(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def validate_config(config: BlockConfig) -> bool:
    """Return True when ``config`` satisfies every structural invariant."""
    if not isinstance(config.language, str) or not config.language:
        return False
    if not _is_line_number(config.start_line_number):
        return False
    lines = config.highlight_lines
    if not isinstance(lines, Iterable) or isinstance(lines, str):
        return False
    if not all(_is_line_number(line) for line in lines):
        return False
    return not (config.fold and config.unfold)


def _clean_lines(lines: object) -> tuple[int, ...]:
    if not isinstance(lines, Iterable) or isinstance(lines, str):
        return ()
    return tuple(sorted({line for line in lines if _is_line_number(line)}))  # type: ignore[misc]


def sanitize_config(config: BlockConfig) -> BlockConfig:
    """Return the nearest configuration that passes :func:`validate_config`.

    ``fold`` and ``unfold`` are each kept only when the other one is unset, so
    a block requesting both ends up with neither.
    """
    start = config.start_line_number
    if not _is_line_number(start):
        finite = isinstance(start, (int, float)) and math.isfinite(start)
        start = max(1, int(start)) if finite else 1
    title = str(config.title)[:TITLE_MAX_LENGTH] if config.title else None
    fold, unfold = bool(config.fold), bool(config.unfold)
    return replace(
        config,
        language=normalize_language(config.language or PLAIN_TEXT),
        highlight_lines=_clean_lines(config.highlight_lines),
        show_line_numbers=bool(config.show_line_numbers),
        start_line_number=start,
        title=title,
        filename=str(config.filename) if config.filename else None,
        fold=fold and not unfold,
        unfold=unfold and not fold,
        exclude=bool(config.exclude),
        custom_theme=str(config.custom_theme) if config.custom_theme else None,
    )


def parse_inline(text: str) -> InlineCode | None:
    """Recognise ``{lang} code``, ``lang: code`` and ``[lang] code`` spans."""
    if not isinstance(text, str) or not text:
        return None
    for pattern in _INLINE_PATTERNS:
        match = pattern.fullmatch(text)
        if match is None:
            continue
        code = match.group("code").strip()
        if not code:
            return None
        return InlineCode(normalize_language(match.group("lang")), code)
    return None


__all__ = [
    "DirectiveOutcome",
    "DirectiveStatus",
    "InlineCode",
    "ParseResult",
    "parse_annotation",
    "parse_annotation_details",
    "parse_highlight_ranges",
    "parse_inline",
    "sanitize_config",
    "split_annotation",
    "unquote",
    "validate_config",
]

"""CSS rules derived from the presentation settings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from codesmith.highlight.structure import BLOCK_CLASS
from codesmith.transformers.passes import COPY_CLASS, LINE_NUMBER_CLASS, TITLE_CLASS

from .processor import INLINE_CLASS


if TYPE_CHECKING:  # pragma: no cover - typing only
    from codesmith.core.settings import HighlightSettings


def _rule(selector: str, declarations: Mapping[str, str]) -> str:
    body = "\n".join(f"  {name}: {value};" for name, value in declarations.items())
    return f"{selector} {{\n{body}\n}}"


def _wrap_declarations(word_wrap: bool) -> dict[str, str]:
    if word_wrap:
        return {"white-space": "pre-wrap", "overflow-wrap": "anywhere"}
    return {"white-space": "pre", "overflow-x": "auto"}


def stylesheet_rules(settings: HighlightSettings) -> Iterable[str]:
    """Yield the individual rules making up the stylesheet."""
    block = f"pre.{BLOCK_CLASS}"
    base = {
        "position": "relative",
        "font-size": settings.font_size,
        "font-family": settings.font_family,
        "line-height": settings.line_height,
        "border-radius": settings.border_radius,
        "padding": settings.padding,
        **_wrap_declarations(settings.enable_word_wrap),
    }
    if not settings.show_background:
        base["background"] = "transparent !important"
    yield _rule(block, base)
    yield _rule(f"{block} code", {"font-family": "inherit", "font-size": "inherit"})
    yield _rule(f"{block}.word-wrap, {block}.word-wrap code", _wrap_declarations(True))
    yield _rule(f"{block} .line.highlighted", {"background-color": "rgba(255, 255, 255, 0.08)"})
    yield _rule(
        f"{block} .{LINE_NUMBER_CLASS}",
        {
            "display": "inline-block",
            "margin-right": "1em",
            "opacity": "0.5",
            "user-select": "none",
            "text-align": "right",
        },
    )
    yield _rule(
        f"{block} .{TITLE_CLASS}",
        {
            "font-size": "0.85em",
            "opacity": "0.8",
            "padding-bottom": "0.5em",
            "margin-bottom": "0.5em",
            "border-bottom": "1px solid currentColor",
        },
    )
    yield _rule(
        f"{block}.with-language-label::after",
        {
            "content": "attr(data-language-label)",
            "position": "absolute",
            "top": "0.25em",
            "right": "3em",
            "font-size": "0.75em",
            "opacity": "0.6",
            "text-transform": "uppercase",
        },
    )
    yield _rule(
        f"{block} .{COPY_CLASS}",
        {
            "position": "absolute",
            "top": "0.25em",
            "right": "0.25em",
            "background": "transparent",
            "border": "none",
            "color": "inherit",
            "cursor": "pointer",
            "opacity": "0.6",
        },
    )
    yield _rule(f"{block}.foldable.folded code", {"display": "none"})
    yield _rule(f"{block}.excluded", {"display": "none"})
    yield _rule(f"code.{INLINE_CLASS}", {"padding": "0.1em 0.3em", "border-radius": "3px"})


def build_stylesheet(settings: HighlightSettings) -> str:
    """Return the stylesheet matching ``settings``, custom CSS appended last."""
    parts = list(stylesheet_rules(settings))
    if settings.custom_css.strip():
        parts.append(settings.custom_css.strip())
    return "\n\n".join(parts) + "\n"


__all__ = ["build_stylesheet", "stylesheet_rules"]

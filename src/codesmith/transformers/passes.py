"""Built-in presentational passes.

Priorities encode the execution order: structural edits (line classes,
line-number nodes) run before the passes that only annotate the ``<pre>``
root, and ``exclude`` runs last so an excluded block is fully rendered before
it is hidden.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bs4.element import Tag

from codesmith.core.dom import add_class, code_element, has_class, iter_lines

from .base import PassContext, transformer


if TYPE_CHECKING:  # pragma: no cover - typing only
    from codesmith.core.config import BlockConfig
    from codesmith.core.settings import HighlightSettings


HIGHLIGHTED_CLASS = "highlighted"
LINE_NUMBER_CLASS = "line-number"
TITLE_CLASS = "codesmith-title"
COPY_CLASS = "codesmith-copy"
LINE_NUMBER_WIDTH = 3


def _has_child(root: Tag, name: str, css_class: str) -> bool:
    return any(
        isinstance(child, Tag) and child.name == name and has_class(child, css_class)
        for child in root.children
    )


@transformer(
    "highlight",
    priority=10,
    when=lambda config, _settings: bool(config.highlight_lines),
)
def mark_highlighted_lines(root: Tag, context: PassContext) -> None:
    """Flag the configured 1-based lines with the ``highlighted`` class."""
    wanted = set(context.config.highlight_lines)
    for index, line in enumerate(iter_lines(root), start=1):
        if index in wanted:
            add_class(line, HIGHLIGHTED_CLASS)


def _wants_line_numbers(config: BlockConfig, settings: HighlightSettings) -> bool:
    return config.show_line_numbers or settings.enable_line_numbers


@transformer("line-numbers", priority=20, when=_wants_line_numbers)
def inject_line_numbers(root: Tag, context: PassContext) -> None:
    """Prepend a ``span.line-number`` gutter cell to every line."""
    add_class(root, "line-numbers")
    start = context.config.start_line_number
    for index, line in enumerate(iter_lines(root)):
        if _has_child(line, "span", LINE_NUMBER_CLASS):
            continue
        number = start + index
        cell = context.soup.new_tag("span", attrs={"class": LINE_NUMBER_CLASS})
        cell["data-line"] = str(number)
        cell.string = str(number).rjust(LINE_NUMBER_WIDTH)
        line.insert(0, cell)


@transformer(
    "title",
    priority=30,
    when=lambda config, _settings: bool(config.title or config.filename),
)
def attach_title(root: Tag, context: PassContext) -> None:
    """Expose the title and filename as attributes and a header element."""
    config = context.config
    if config.title:
        root["data-title"] = config.title
    if config.filename:
        root["data-filename"] = config.filename
    add_class(root, "with-title")
    if _has_child(root, "div", TITLE_CLASS):
        return
    header = context.soup.new_tag("div", attrs={"class": TITLE_CLASS})
    header.string = config.title or config.filename or ""
    code = code_element(root)
    if code is not None:
        code.insert_before(header)
    else:
        root.insert(0, header)


@transformer(
    "language-label",
    priority=40,
    when=lambda _config, settings: settings.enable_language_label,
)
def annotate_language(root: Tag, context: PassContext) -> None:
    """Record the language shown in the block label."""
    root["data-language-label"] = context.language
    add_class(root, "with-language-label")


@transformer(
    "copy",
    priority=50,
    when=lambda _config, settings: settings.enable_code_copy,
)
def add_copy_affordance(root: Tag, context: PassContext) -> None:
    """Attach the original source and a copy button to the block."""
    add_class(root, "copyable")
    root["data-original-code"] = context.code
    if _has_child(root, "button", COPY_CLASS):
        return
    button = context.soup.new_tag("button", attrs={"class": COPY_CLASS})
    button["type"] = "button"
    button["aria-label"] = "Copy code"
    button.string = "Copy"
    root.insert(0, button)


@transformer(
    "fold",
    priority=60,
    when=lambda config, settings: config.foldable and settings.enable_folding,
)
def mark_foldable(root: Tag, context: PassContext) -> None:
    """Make the block collapsible, collapsed when ``fold`` was requested."""
    add_class(root, "foldable")
    if context.config.fold:
        add_class(root, "folded")
        root["data-fold-state"] = "folded"
    else:
        root["data-fold-state"] = "unfolded"


@transformer(
    "word-wrap",
    priority=70,
    when=lambda _config, settings: settings.enable_word_wrap,
)
def mark_word_wrap(root: Tag, context: PassContext) -> None:
    add_class(root, "word-wrap")


@transformer(
    "exclude",
    priority=80,
    when=lambda config, _settings: config.exclude,
    always=True,
)
def mark_excluded(root: Tag, context: PassContext) -> None:
    """Hide the block while keeping its rendered content."""
    add_class(root, "excluded")
    root["hidden"] = "hidden"


__all__ = [
    "add_copy_affordance",
    "annotate_language",
    "attach_title",
    "inject_line_numbers",
    "mark_excluded",
    "mark_foldable",
    "mark_highlighted_lines",
    "mark_word_wrap",
]

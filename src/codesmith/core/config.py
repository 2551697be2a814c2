"""Per-block configuration parsed from a code fence annotation.

BlockConfig

`language` (`str`)
: Normalised language identifier. Never empty; falls back to ``"text"``.

`highlight_lines` (`tuple[int, ...]`)
: 1-based line numbers to emphasise, deduplicated and sorted ascending.

`show_line_numbers` (`bool`)
: Render a gutter with line numbers.

`start_line_number` (`int`)
: Number displayed on the first line. Always ``>= 1`` once sanitised.

`title` (`str | None`)
: Caption displayed above the block, truncated to :data:`TITLE_MAX_LENGTH`.

`filename` (`str | None`)
: File name displayed in the block header.

`fold` / `unfold` (`bool`)
: Make the block collapsible, initially collapsed (``fold``) or expanded
  (``unfold``). A validated configuration never sets both.

`exclude` (`bool`)
: Render the block but keep it hidden.

`custom_theme` (`str | None`)
: Theme overriding the ambient one for this block only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from .languages import PLAIN_TEXT


TITLE_MAX_LENGTH = 200


@dataclass(frozen=True, slots=True)
class BlockConfig:
    """Immutable rendering options for one code fragment."""

    language: str = PLAIN_TEXT
    highlight_lines: tuple[int, ...] = ()
    show_line_numbers: bool = False
    start_line_number: int = 1
    title: str | None = None
    filename: str | None = None
    fold: bool = False
    unfold: bool = False
    exclude: bool = False
    custom_theme: str | None = None

    @property
    def foldable(self) -> bool:
        """Return True when the block exposes a fold toggle."""
        return self.fold or self.unfold

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BlockConfig:
        """Rebuild a configuration from a :meth:`describe` snapshot.

        Unknown keys are ignored; the result is not sanitised.
        """
        known = {field.name for field in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if isinstance(values.get("highlight_lines"), list):
            values["highlight_lines"] = tuple(values["highlight_lines"])
        return cls(**values)

    def describe(self) -> dict[str, object]:
        """Return a JSON-friendly snapshot of the configuration."""
        return {
            "language": self.language,
            "highlight_lines": list(self.highlight_lines),
            "show_line_numbers": self.show_line_numbers,
            "start_line_number": self.start_line_number,
            "title": self.title,
            "filename": self.filename,
            "fold": self.fold,
            "unfold": self.unfold,
            "exclude": self.exclude,
            "custom_theme": self.custom_theme,
        }


__all__ = ["TITLE_MAX_LENGTH", "BlockConfig"]

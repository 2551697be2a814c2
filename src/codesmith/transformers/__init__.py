"""Presentational passes run over highlighted blocks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import passes as _passes
from .base import (
    Pass,
    PassContext,
    PassHandler,
    PassPredicate,
    TransformerDefinition,
    TransformerRegistry,
    TransformerSelector,
    transformer,
)


if TYPE_CHECKING:  # pragma: no cover - typing only
    from codesmith.core.config import BlockConfig
    from codesmith.core.settings import HighlightSettings


PASS_ORDER = (
    "highlight",
    "line-numbers",
    "title",
    "language-label",
    "copy",
    "fold",
    "word-wrap",
    "exclude",
)


def build_default_registry() -> TransformerRegistry:
    """Return a registry holding the built-in passes."""
    registry = TransformerRegistry()
    registry.collect_from(_passes)
    return registry


default_registry = build_default_registry()


def select_passes(config: BlockConfig, settings: HighlightSettings) -> list[Pass]:
    """Select the built-in passes applying to ``config``."""
    return TransformerSelector(default_registry).select(config, settings)


__all__ = [
    "PASS_ORDER",
    "Pass",
    "PassContext",
    "PassHandler",
    "PassPredicate",
    "TransformerDefinition",
    "TransformerRegistry",
    "TransformerSelector",
    "build_default_registry",
    "default_registry",
    "select_passes",
    "transformer",
]

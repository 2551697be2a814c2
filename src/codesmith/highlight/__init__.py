"""Highlighting engine, cache, and pipeline."""

from __future__ import annotations

from .cache import CacheEntry, CacheKey, HighlightCache, content_hash, source_digest
from .engine import ENGINE_LANGUAGE_ALIASES, HighlightEngine, PygmentsEngine
from .pipeline import CORE_LANGUAGES, FALLBACK_TTL, HighlightPipeline, ThemeMode
from .structure import FallbackLevel, RenderedBlock, build_plain_structure


__all__ = [
    "CORE_LANGUAGES",
    "ENGINE_LANGUAGE_ALIASES",
    "FALLBACK_TTL",
    "CacheEntry",
    "CacheKey",
    "FallbackLevel",
    "HighlightCache",
    "HighlightEngine",
    "HighlightPipeline",
    "PygmentsEngine",
    "RenderedBlock",
    "ThemeMode",
    "build_plain_structure",
    "content_hash",
    "source_digest",
]

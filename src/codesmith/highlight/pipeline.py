"""Highlighting pipeline orchestrating engine, passes and cache.

:class:`HighlightPipeline` owns every piece of mutable state involved in
rendering (the loaded-language and loaded-theme registries and the block
cache) so that independent pipelines can coexist, e.g. one per test.

Themes, like languages, are loaded before the first render that needs them.
Rendering never raises. When the engine fails the pipeline walks a fallback
chain driven by :class:`~codesmith.core.exceptions.EngineErrorKind`:

1. a theme the engine reports as missing is reloaded and the render retried
   once;
2. the fragment is rendered with the fallback language (``text``) and the
   same theme;
3. an unstyled structure is built without the engine.

Fallback results are cached under the key of the original request with a
short lifetime, so a language that becomes available later is picked up
quickly.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from enum import Enum
import time

from bs4 import BeautifulSoup
from bs4.element import Tag

from codesmith.core.config import BlockConfig
from codesmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from codesmith.core.exceptions import EngineError, EngineErrorKind
from codesmith.core.languages import LANGUAGE_ALIASES, PLAIN_TEXT
from codesmith.core.settings import HighlightSettings
from codesmith.transformers import (
    Pass,
    PassContext,
    TransformerSelector,
    default_registry,
)

from .cache import CacheKey, Clock, HighlightCache
from .engine import ENGINE_LANGUAGE_ALIASES, HighlightEngine, PygmentsEngine
from .structure import (
    FallbackLevel,
    RenderedBlock,
    build_plain_structure,
    extract_inline_markup,
    plain_inline_markup,
)


CORE_LANGUAGES = (
    "javascript",
    "typescript",
    "python",
    "html",
    "css",
    "json",
    "yaml",
    "markdown",
    "bash",
    "shell",
    PLAIN_TEXT,
)
FALLBACK_TTL = timedelta(minutes=5)
INLINE_VARIANT = "inline"


class ThemeMode(str, Enum):
    """Display mode reported by the host."""

    LIGHT = "light"
    DARK = "dark"


def _as_engine_error(exc: BaseException) -> EngineError:
    if isinstance(exc, EngineError):
        return exc
    return EngineError(EngineErrorKind.OTHER, str(exc) or type(exc).__name__)


class HighlightPipeline:
    """Turn (code, language, config) into rendered markup."""

    def __init__(
        self,
        settings: HighlightSettings | None = None,
        *,
        engine: HighlightEngine | None = None,
        cache: HighlightCache | None = None,
        selector: TransformerSelector | None = None,
        emitter: DiagnosticEmitter | None = None,
        display_mode: ThemeMode | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.settings = settings or HighlightSettings()
        self.engine: HighlightEngine = engine or PygmentsEngine()
        self.cache = cache or HighlightCache(
            max_size=self.settings.max_cache_size,
            expiry=timedelta(days=self.settings.cache_expiration_days),
            clock=clock,
        )
        self.selector = selector or TransformerSelector(default_registry)
        self.emitter: DiagnosticEmitter = emitter or LoggingEmitter(
            debug_enabled=self.settings.debug_mode
        )
        self.display_mode = display_mode
        self._language_targets: dict[str, str] = {}
        self._unavailable_languages: set[str] = set()
        self._themes: set[str] = set()

    # -- settings and themes ---------------------------------------------------

    def update_settings(self, settings: HighlightSettings) -> None:
        """Swap the settings, resizing or dropping the cache accordingly."""
        self.settings = settings
        self.emitter.debug_enabled = settings.debug_mode
        self.cache.resize(
            settings.max_cache_size, timedelta(days=settings.cache_expiration_days)
        )
        if not settings.cache_enabled:
            self.cache.clear()

    def set_display_mode(self, mode: ThemeMode | str | None) -> None:
        """Record the host display mode used to pick the ambient theme."""
        self.display_mode = ThemeMode(mode) if mode is not None else None

    def current_theme(self) -> str:
        """Return the theme derived from the display mode and the settings."""
        settings = self.settings
        if settings.auto_theme_switch and self.display_mode is ThemeMode.DARK:
            return settings.default_dark_theme
        if settings.auto_theme_switch and self.display_mode is ThemeMode.LIGHT:
            return settings.default_light_theme
        return settings.default_theme

    def resolve_theme(self, config: BlockConfig | None, theme_override: str | None = None) -> str:
        """Apply the override, block, ambient, default precedence."""
        if theme_override:
            return theme_override
        if config is not None and config.custom_theme:
            return config.custom_theme
        return self.current_theme()

    def clear_cache(self) -> None:
        self.cache.clear()

    # -- resource loading ------------------------------------------------------

    @property
    def loaded_languages(self) -> frozenset[str]:
        return frozenset(self._language_targets)

    @property
    def loaded_themes(self) -> frozenset[str]:
        return frozenset(self._themes)

    async def initialize(self) -> None:
        """Preload the configured themes and, unless lazy, the common languages."""
        themes = [
            self.settings.default_theme,
            self.settings.default_dark_theme,
            self.settings.default_light_theme,
            *self.settings.themes,
        ]
        for theme in dict.fromkeys(themes):
            await self.load_theme(theme)
        if self.settings.lazy_loading:
            await self.ensure_language(PLAIN_TEXT)
            return
        for language in dict.fromkeys([*CORE_LANGUAGES, *self.settings.languages]):
            await self.ensure_language(language)

    async def load_language(self, language: str) -> bool:
        """Ask the engine to load ``language``; return whether it succeeded."""
        try:
            await self.engine.load_language(language)
        except Exception as exc:
            self.emitter.debug("Failed to load language %s: %s", language, exc)
            return False
        self._language_targets[language] = language
        self.emitter.event("language_loaded", {"language": language})
        return True

    async def load_theme(self, theme: str) -> bool:
        """Ask the engine to load ``theme``; return whether it succeeded."""
        try:
            await self.engine.load_theme(theme)
        except Exception as exc:
            self.emitter.warning(f"Failed to load theme {theme}", exc)
            return False
        self._themes.add(theme)
        self.emitter.event("theme_loaded", {"theme": theme})
        return True

    async def ensure_language(self, language: str) -> str:
        """Return the identifier to hand to the engine for ``language``.

        Unknown identifiers are retried through the alias tables before giving
        up; the requested name is returned unchanged when nothing loads, which
        lets the render fail and the fallback chain take over.
        """
        target = self._language_targets.get(language)
        if target is not None:
            return target
        if language in self._unavailable_languages:
            return language
        if await self.load_language(language):
            return language

        for alias in self._alias_candidates(language):
            if alias in self._language_targets or await self.load_language(alias):
                self._language_targets[language] = self._language_targets[alias]
                self.emitter.event("language_loaded", {"language": language, "alias": alias})
                return self._language_targets[alias]

        self._unavailable_languages.add(language)
        self.emitter.warning(f"Language {language} is not available for highlighting")
        return language

    def _alias_candidates(self, language: str) -> Iterable[str]:
        seen = {language}
        for table in (LANGUAGE_ALIASES, ENGINE_LANGUAGE_ALIASES):
            alias = table.get(language)
            if alias and alias not in seen:
                seen.add(alias)
                yield alias
                nested = ENGINE_LANGUAGE_ALIASES.get(alias)
                if nested and nested not in seen:
                    seen.add(nested)
                    yield nested

    # -- rendering -------------------------------------------------------------

    async def render(
        self,
        code: str,
        language: str,
        config: BlockConfig | None = None,
        theme_override: str | None = None,
    ) -> RenderedBlock:
        """Highlight ``code`` and apply the passes selected for ``config``."""
        config = config or BlockConfig(language=language)
        theme = self.resolve_theme(config, theme_override)
        passes = self.selector.select(config, self.settings)
        key = CacheKey.for_code(code, language, theme, variant=self._variant(config, passes))

        cached = self._lookup(key, code)
        if cached is not None:
            return cached

        soup, used_language, fallback = await self._highlight(code, language, theme)
        context = PassContext(
            soup=soup,
            config=config,
            settings=self.settings,
            code=code,
            language=language,
            theme=theme,
        )
        applied = self._apply_passes(soup, passes, context)
        block = RenderedBlock(
            html=soup.decode(),
            language=used_language,
            theme=theme,
            requested_language=language,
            fallback=fallback,
            passes=tuple(applied),
        )
        self._store(key, code, block)
        return block

    async def highlight_inline(self, code: str, language: str) -> str:
        """Return highlighted markup for an inline span (no ``pre``/``code``)."""
        theme = self.current_theme()
        key = CacheKey.for_code(code, language, theme, variant=INLINE_VARIANT)
        cached = self._lookup(key, code)
        if cached is not None:
            return cached.html

        soup, used_language, fallback = await self._highlight(code, language, theme)
        markup = None
        if fallback is not FallbackLevel.MINIMAL:
            markup = extract_inline_markup(soup)
        if markup is None:
            markup = plain_inline_markup(code)
        block = RenderedBlock(
            html=markup,
            language=used_language,
            theme=theme,
            requested_language=language,
            fallback=fallback,
        )
        self._store(key, code, block)
        return markup

    def _lookup(self, key: CacheKey, code: str) -> RenderedBlock | None:
        if not self.settings.cache_enabled:
            return None
        entry = self.cache.get(key)
        if entry is None:
            return None
        if not entry.matches(code):
            self.emitter.debug("Discarding cache entry %s computed from different source", key)
            self.cache.discard(key)
            return None
        self.emitter.event("cache_hit", {"language": key.language, "theme": key.theme})
        return entry.block

    def _store(self, key: CacheKey, code: str, block: RenderedBlock) -> None:
        if not self.settings.cache_enabled:
            return
        ttl = FALLBACK_TTL if block.is_fallback else None
        self.cache.put(key, self.cache.entry_for(block, code, ttl=ttl))

    @staticmethod
    def _variant(config: BlockConfig, passes: Iterable[Pass]) -> str:
        names = ",".join(item.name for item in passes)
        options = (
            config.highlight_lines,
            config.start_line_number,
            config.title,
            config.filename,
            config.fold,
        )
        return f"{names}|{options!r}"

    async def _render_once(self, code: str, language: str, theme: str) -> BeautifulSoup:
        try:
            return await self.engine.render(code, language, theme)
        except Exception as exc:
            raise _as_engine_error(exc) from exc

    async def _highlight(
        self, code: str, language: str, theme: str
    ) -> tuple[BeautifulSoup, str, FallbackLevel | None]:
        target = await self.ensure_language(language)
        theme_loaded_now = theme not in self._themes
        if theme_loaded_now:
            await self.load_theme(theme)
        try:
            return await self._render_once(code, target, theme), target, None
        except EngineError as exc:
            error = exc

        # The engine may have dropped a theme loaded by an earlier call.
        if error.kind is EngineErrorKind.THEME_NOT_FOUND and not theme_loaded_now:
            self.emitter.debug("Attempting to load theme %s", theme)
            if await self.load_theme(theme):
                try:
                    return await self._render_once(code, target, theme), target, None
                except EngineError as exc:
                    error = exc

        self.emitter.warning(f"Failed to highlight code for language {language}", error)
        fallback_language = self.settings.fallback_language
        self.emitter.event(
            "fallback", {"level": FallbackLevel.PLAIN_LANGUAGE.value, "language": language}
        )
        plain_target = await self.ensure_language(fallback_language)
        try:
            soup = await self._render_once(code, plain_target, theme)
        except EngineError as exc:
            self.emitter.debug("Plain-text rendering failed: %s", exc)
        else:
            return soup, plain_target, FallbackLevel.PLAIN_LANGUAGE

        self.emitter.event("fallback", {"level": FallbackLevel.MINIMAL.value, "language": language})
        return build_plain_structure(code, theme=theme), PLAIN_TEXT, FallbackLevel.MINIMAL

    def _apply_passes(
        self, soup: BeautifulSoup, passes: Iterable[Pass], context: PassContext
    ) -> list[str]:
        root = soup.find("pre")
        if not isinstance(root, Tag):
            return []
        applied: list[str] = []
        for item in passes:
            try:
                item(root, context)
            except Exception as exc:
                self.emitter.warning(f"Pass '{item.name}' failed", exc)
                continue
            applied.append(item.name)
        return applied


__all__ = [
    "CORE_LANGUAGES",
    "FALLBACK_TTL",
    "HighlightPipeline",
    "ThemeMode",
]

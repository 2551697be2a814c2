"""Process-wide highlighting settings.

HighlightSettings

`default_theme` / `default_dark_theme` / `default_light_theme` (`str`)
: Pygments style names used when no block or call override applies. The dark
  and light variants are picked from the host display mode when
  `auto_theme_switch` is enabled.

`themes` (`list[str]`)
: Styles preloaded by :meth:`HighlightPipeline.initialize`.

`enable_*` (`bool`)
: Feature toggles consulted by the transformer selector and the document
  processor.

`languages` (`list[str]`)
: Languages preloaded at start-up unless `lazy_loading` is set.

`auto_detect_language` (`bool`)
: Guess the language of fences that carry no annotation.

`fallback_language` (`str`)
: Language used when the requested one cannot be highlighted.

`cache_enabled` / `max_cache_size` / `cache_expiration_days`
: Rendered block cache configuration.

`font_size`, `font_family`, `line_height`, `border_radius`, `padding`,
`show_background`, `custom_css`
: Presentation values consumed by the stylesheet builder.

`enable_transformers` (`bool`)
: Master switch for presentational passes.

`debug_mode` (`bool`)
: Emit debug diagnostics. Never changes control flow.

Persisted snapshots are merged over the defaults and every invalid field is
replaced by its default; the corrected snapshot is written back.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pygments.styles import get_all_styles

from .exceptions import SettingsImportError
from .languages import PLAIN_TEXT
from .user_dir import get_user_dir


logger = logging.getLogger(__name__)

DEFAULT_THEMES = ("github-dark", "default", "monokai", "solarized-light")
DEFAULT_LANGUAGES = ("javascript", "typescript", "python", "cpp", "java", "html", "css")
REQUIRED_IMPORT_FIELDS = (
    "default_theme",
    "default_dark_theme",
    "default_light_theme",
    "enable_line_numbers",
    "enable_inline_highlight",
    "cache_enabled",
)


@lru_cache(maxsize=1)
def available_themes() -> frozenset[str]:
    """Return the names of every installed Pygments style."""
    return frozenset(get_all_styles())


class HighlightSettings(BaseModel):
    """User-facing configuration shared by every highlighted block."""

    model_config = ConfigDict(extra="ignore")

    default_theme: str = "github-dark"
    default_dark_theme: str = "github-dark"
    default_light_theme: str = "default"
    auto_theme_switch: bool = True
    themes: list[str] = Field(default_factory=lambda: list(DEFAULT_THEMES), min_length=1)

    enable_line_numbers: bool = False
    enable_inline_highlight: bool = True
    enable_folding: bool = True
    enable_code_copy: bool = True
    enable_language_label: bool = True
    enable_word_wrap: bool = False

    languages: list[str] = Field(default_factory=lambda: list(DEFAULT_LANGUAGES), min_length=1)
    auto_detect_language: bool = True
    fallback_language: str = Field(default=PLAIN_TEXT, min_length=1)

    cache_enabled: bool = True
    max_cache_size: int = Field(default=100, ge=1)
    cache_expiration_days: int = Field(default=7, ge=1)
    lazy_loading: bool = False

    font_size: str = Field(default="14px", min_length=1)
    font_family: str = Field(default="Consolas, 'Courier New', monospace", min_length=1)
    line_height: str = Field(default="1.4", min_length=1)
    border_radius: str = Field(default="4px", min_length=1)
    show_background: bool = True
    padding: str = Field(default="16px", min_length=1)

    enable_transformers: bool = True
    custom_css: str = ""
    debug_mode: bool = False

    @field_validator("default_theme", "default_dark_theme", "default_light_theme")
    @classmethod
    def _known_theme(cls, value: str) -> str:
        if value not in available_themes():
            raise ValueError(f"unknown theme '{value}'")
        return value


def validate_and_migrate(data: Mapping[str, Any] | None) -> tuple[HighlightSettings, bool]:
    """Merge ``data`` over the defaults, repairing invalid fields.

    Returns the validated settings and whether they differ from ``data``
    (missing, unknown, coerced, or replaced fields), in which case the caller
    should persist them back.
    """
    defaults = HighlightSettings().model_dump()
    raw = dict(data) if isinstance(data, Mapping) else {}
    merged = {**defaults, **{key: value for key, value in raw.items() if key in defaults}}

    settings: HighlightSettings | None = None
    while settings is None:
        try:
            settings = HighlightSettings.model_validate(merged)
        except ValidationError as exc:
            invalid = {error["loc"][0] for error in exc.errors() if error["loc"]}
            invalid &= set(defaults)
            if not invalid:
                logger.warning("Discarding unusable settings snapshot: %s", exc)
                settings = HighlightSettings()
                break
            for field in sorted(invalid):  # type: ignore[type-var]
                logger.warning(
                    "Invalid setting %s=%r replaced by its default", field, merged[field]
                )
                merged[field] = defaults[field]

    changed = settings.model_dump(mode="json") != raw
    return settings, changed


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(path: Path, settings: HighlightSettings) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(settings.model_dump(mode="json"), indent=2)
    path.write_text(payload + "\n", encoding="utf-8")


class SettingsStore:
    """Load and persist :class:`HighlightSettings` as a JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or get_user_dir().settings_path(create=False)

    def load(self) -> HighlightSettings:
        """Return the persisted settings, healing and saving them when needed."""
        data: Any = None
        if self.path.exists():
            try:
                data = _read_json(self.path)
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Unable to read settings from %s: %s", self.path, exc)
        settings, changed = validate_and_migrate(data)
        if changed:
            self.save(settings)
        return settings

    def save(self, settings: HighlightSettings) -> None:
        """Persist ``settings`` to :attr:`path`."""
        _write_json(self.path, settings)

    def reset(self) -> HighlightSettings:
        """Overwrite the persisted snapshot with the defaults."""
        settings = HighlightSettings()
        self.save(settings)
        return settings


def export_settings(settings: HighlightSettings, path: Path) -> Path:
    """Write a shareable JSON snapshot of ``settings`` to ``path``."""
    _write_json(path, settings)
    return path


def import_settings(path: Path) -> HighlightSettings:
    """Load a snapshot written by :func:`export_settings`.

    The snapshot must be a JSON object carrying every name listed in
    :data:`REQUIRED_IMPORT_FIELDS`; remaining fields are healed like a regular
    load.
    """
    try:
        data = _read_json(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise SettingsImportError(f"Unable to read settings file '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsImportError("Settings file must contain a JSON object.")
    missing = [name for name in REQUIRED_IMPORT_FIELDS if name not in data]
    if missing:
        raise SettingsImportError(f"Settings file is missing required fields: {', '.join(missing)}")
    settings, _ = validate_and_migrate(data)
    return settings


__all__ = [
    "DEFAULT_LANGUAGES",
    "DEFAULT_THEMES",
    "REQUIRED_IMPORT_FIELDS",
    "HighlightSettings",
    "SettingsStore",
    "available_themes",
    "export_settings",
    "import_settings",
    "validate_and_migrate",
]

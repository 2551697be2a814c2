"""Primary public API for codesmith."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from codesmith.adapters import (
    AnnotatedFenceExtension,
    CodeProcessor,
    build_stylesheet,
    markdown_to_html,
    render_markdown,
)
from codesmith.core.config import BlockConfig
from codesmith.core.exceptions import (
    CodesmithError,
    EngineError,
    EngineErrorKind,
    SettingsImportError,
)
from codesmith.core.parser import (
    parse_annotation,
    parse_annotation_details,
    parse_inline,
    sanitize_config,
    validate_config,
)
from codesmith.core.settings import HighlightSettings, SettingsStore
from codesmith.core.user_dir import configure_user_dir, get_user_dir, user_dir_context
from codesmith.highlight import (
    FallbackLevel,
    HighlightCache,
    HighlightEngine,
    HighlightPipeline,
    PygmentsEngine,
    RenderedBlock,
    ThemeMode,
)
from codesmith.transformers import TransformerRegistry, TransformerSelector, transformer


try:
    __version__ = _pkg_version("codesmith")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "AnnotatedFenceExtension",
    "BlockConfig",
    "CodeProcessor",
    "CodesmithError",
    "EngineError",
    "EngineErrorKind",
    "FallbackLevel",
    "HighlightCache",
    "HighlightEngine",
    "HighlightPipeline",
    "HighlightSettings",
    "PygmentsEngine",
    "RenderedBlock",
    "SettingsImportError",
    "SettingsStore",
    "ThemeMode",
    "TransformerRegistry",
    "TransformerSelector",
    "__version__",
    "build_stylesheet",
    "configure_user_dir",
    "get_user_dir",
    "markdown_to_html",
    "parse_annotation",
    "parse_annotation_details",
    "parse_inline",
    "render_markdown",
    "sanitize_config",
    "transformer",
    "user_dir_context",
    "validate_config",
]

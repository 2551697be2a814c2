"""CLI command implementations exposed via `codesmith.cli`."""

from __future__ import annotations

from .catalog import languages, themes
from .render import inline, parse, render
from .settings import settings_app


__all__ = ["inline", "languages", "parse", "render", "settings_app", "themes"]

"""Language identifiers accepted in code fence annotations."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


PLAIN_TEXT = "text"
"""Sentinel language used when nothing better is known."""

LANGUAGE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "js": "javascript",
        "mjs": "javascript",
        "cjs": "javascript",
        "jsx": "javascript",
        "ts": "typescript",
        "tsx": "typescript",
        "py": "python",
        "rb": "ruby",
        "sh": "shell",
        "bash": "shell",
        "zsh": "shell",
        "fish": "shell",
        "ps1": "powershell",
        "pwsh": "powershell",
        "yml": "yaml",
        "md": "markdown",
        "vue": "vue",
        "svelte": "svelte",
    }
)

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "javascript",
    "js",
    "typescript",
    "ts",
    "python",
    "py",
    "java",
    "cpp",
    "c",
    "csharp",
    "cs",
    "php",
    "ruby",
    "rb",
    "go",
    "rust",
    "swift",
    "kotlin",
    "scala",
    "shell",
    "bash",
    "powershell",
    "html",
    "css",
    "scss",
    "sass",
    "less",
    "xml",
    "json",
    "yaml",
    "yml",
    "toml",
    "markdown",
    "md",
    "sql",
    "graphql",
    "dockerfile",
    "nginx",
    "apache",
    "vue",
    "svelte",
    "jsx",
    "tsx",
)


def normalize_language(language: str | None) -> str:
    """Lower-case ``language`` and resolve it through :data:`LANGUAGE_ALIASES`.

    Unknown identifiers are returned lower-cased; the highlighting engine is
    the final judge of whether they are usable. Blank input maps to
    :data:`PLAIN_TEXT`.
    """
    if not isinstance(language, str):
        return PLAIN_TEXT
    normalized = language.strip().lower()
    if not normalized:
        return PLAIN_TEXT
    return LANGUAGE_ALIASES.get(normalized, normalized)


__all__ = [
    "LANGUAGE_ALIASES",
    "PLAIN_TEXT",
    "SUPPORTED_LANGUAGES",
    "normalize_language",
]

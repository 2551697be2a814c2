"""Custom exception hierarchy for the highlighting pipeline."""

from __future__ import annotations

from enum import Enum


class CodesmithError(RuntimeError):
    """Base exception for codesmith failures."""


class EngineErrorKind(Enum):
    """Classification attached to failures raised by a highlighting engine."""

    THEME_NOT_FOUND = "theme-not-found"
    LANGUAGE_UNUSABLE = "language-unusable"
    OTHER = "other"


class EngineError(CodesmithError):
    """Raised by a highlighting engine when it cannot render a fragment."""

    def __init__(self, kind: EngineErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class SettingsImportError(CodesmithError):
    """Raised when an imported settings snapshot is rejected."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


__all__ = [
    "CodesmithError",
    "EngineError",
    "EngineErrorKind",
    "SettingsImportError",
    "exception_messages",
]

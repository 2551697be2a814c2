"""Location of the per-user codesmith directory holding persisted settings.

The directory is resolved on every call, in this order:

1. a root installed with :func:`configure_user_dir` or :func:`user_dir_context`;
2. the ``CODESMITH_HOME`` environment variable;
3. ``~/.codesmith``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import os
from pathlib import Path


ENV_VAR = "CODESMITH_HOME"
SETTINGS_FILENAME = "settings.json"

_root_override: Path | None = None


@dataclass(frozen=True, slots=True)
class CodesmithUserDir:
    """Resolved user root plus helpers to build paths below it."""

    root: Path

    def data_path(self, *parts: str | Path, create: bool = True) -> Path:
        """Return a path under the user root, creating parent directories if needed."""
        target = self.root.joinpath(*parts)
        if create:
            target.parent.mkdir(parents=True, exist_ok=True)
        return target

    def settings_path(self, *, create: bool = True) -> Path:
        """Return the location of the persisted settings snapshot."""
        return self.data_path(SETTINGS_FILENAME, create=create)


def _default_root() -> Path:
    env_root = os.environ.get(ENV_VAR)
    if env_root:
        return Path(env_root).expanduser()
    return Path.home() / ".codesmith"


def get_user_dir() -> CodesmithUserDir:
    """Return the user directory currently in effect."""
    return CodesmithUserDir(root=_root_override or _default_root())


def configure_user_dir(root: str | Path | None = None) -> CodesmithUserDir:
    """Pin the user directory to ``root``; ``None`` restores the default lookup."""
    global _root_override
    _root_override = Path(root).expanduser() if root is not None else None
    return get_user_dir()


@contextmanager
def user_dir_context(root: str | Path | None = None) -> Iterator[CodesmithUserDir]:
    """Temporarily pin the user directory, restoring the previous one on exit."""
    global _root_override
    previous = _root_override
    try:
        yield configure_user_dir(root)
    finally:
        _root_override = previous


__all__ = [
    "ENV_VAR",
    "CodesmithUserDir",
    "configure_user_dir",
    "get_user_dir",
    "user_dir_context",
]

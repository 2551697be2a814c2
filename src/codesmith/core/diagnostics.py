"""Diagnostic abstractions shared by the pipeline and the document processor."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def debug(self, message: str, *args: Any) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def debug(self, message: str, *args: Any) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module.

    Debug messages and events are only emitted when ``debug_enabled`` is set,
    which mirrors the ``debug_mode`` user setting.
    """

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None and self.debug_enabled:
            self._logger.warning(message, exc_info=exc)
        elif exc is not None:
            self._logger.warning("%s (%s)", message, exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def debug(self, message: str, *args: Any) -> None:
        if not self.debug_enabled:
            return
        self._logger.debug(message, *args)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        if not self.debug_enabled:
            return
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "cache_hit":
        return f"Reusing cached highlight ({data.get('language')}, {data.get('theme')})"

    if name == "language_loaded":
        language = data.get("language") or "<unknown>"
        alias = data.get("alias")
        suffix = f" (via {alias})" if alias else ""
        return f"Loaded language: {language}{suffix}"

    if name == "theme_loaded":
        return f"Loaded theme: {data.get('theme') or '<unknown>'}"

    if name == "fallback":
        level = data.get("level") or "<unknown>"
        language = data.get("language") or "<unknown>"
        return f"Highlight fallback '{level}' used for language {language}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "format_event_message",
]

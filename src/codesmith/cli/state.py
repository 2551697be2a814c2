"""Shared CLI state management utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from ..core.diagnostics import LoggingEmitter
from ..core.exceptions import exception_messages
from ..core.settings import HighlightSettings, SettingsStore
from ..highlight.pipeline import HighlightPipeline


_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


@dataclass(slots=True)
class CLIState:
    """Shared state controlling CLI diagnostics."""

    verbosity: int = 0
    show_tracebacks: bool = False
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Return a lazily instantiated stdout console."""
        if self._console is None or self._console.file is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Return a lazily instantiated stderr console."""
        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console


_CLI_STATE = CLIState()


def get_cli_state() -> CLIState:
    """Return the singleton CLI state shared across commands."""
    return _CLI_STATE


def set_cli_state(*, verbosity: int | None = None, debug: bool | None = None) -> None:
    """Update the global CLI state with verbosity and debug flags."""
    state = get_cli_state()
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug


def configure_logging() -> None:
    """Route library logging to stderr through rich, honouring verbosity."""
    state = get_cli_state()
    level = _LOG_LEVELS[min(state.verbosity, len(_LOG_LEVELS) - 1)]
    if state.show_tracebacks:
        level = logging.DEBUG
    handler = RichHandler(
        console=state.err_console,
        show_path=False,
        show_time=False,
        rich_tracebacks=state.show_tracebacks,
    )
    logger = logging.getLogger("codesmith")
    logger.handlers = [handler]
    logger.setLevel(level)


def load_settings(path: Path | None = None) -> HighlightSettings:
    """Load the persisted settings, or those stored at ``path``."""
    return SettingsStore(path).load()


def build_pipeline(settings: HighlightSettings) -> HighlightPipeline:
    """Create a pipeline whose debug channel follows the CLI flags."""
    state = get_cli_state()
    emitter = LoggingEmitter(debug_enabled=settings.debug_mode or state.show_tracebacks)
    return HighlightPipeline(settings, emitter=emitter)


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Render a formatted message to the console, including optional diagnostics."""
    state = get_cli_state()
    style = "red" if level == "error" else "yellow"
    text = Text.assemble(
        (f"{level}: ", f"bold {style}"),
        (message, style),
    )

    if exception is not None and state.verbosity >= 1:
        extra_lines: list[str] = []
        detail = str(exception).strip()
        if detail and detail not in message:
            extra_lines.append(detail)
        extra_lines.append(f"type: {type(exception).__name__}")
        if state.verbosity >= 2:
            causes = exception_messages(exception)[1:]
            if causes:
                extra_lines.append("caused by:")
                extra_lines.extend(f"  {entry}" for entry in causes)
        text.append("\n")
        text.append("\n".join(extra_lines), style=style)

    console = state.err_console if level != "info" else state.console
    console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    """Log a warning-level message to stderr respecting verbosity settings."""
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    """Log an error-level message to stderr respecting verbosity settings."""
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether full tracebacks should be displayed."""
    return get_cli_state().show_tracebacks


__all__ = [
    "CLIState",
    "build_pipeline",
    "configure_logging",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "load_settings",
    "render_message",
    "set_cli_state",
]

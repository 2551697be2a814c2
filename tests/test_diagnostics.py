from __future__ import annotations

import logging

import pytest

from codesmith.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    format_event_message,
)
from codesmith.core.exceptions import EngineError, EngineErrorKind, exception_messages


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False
    assert isinstance(emitter, DiagnosticEmitter)


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.ERROR):
        emitter.error("boom")
    assert any(record.message == "boom" for record in caplog.records)
    assert emitter.debug_enabled is True


def test_debug_channel_is_gated(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("codesmith.tests.diagnostics")
    quiet = LoggingEmitter(logger_obj=logger)
    loud = LoggingEmitter(logger_obj=logger, debug_enabled=True)

    with caplog.at_level(logging.DEBUG, logger="codesmith.tests.diagnostics"):
        quiet.debug("hidden %s", 1)
        quiet.event("theme_loaded", {"theme": "monokai"})
        assert not caplog.records

        loud.debug("shown %s", 2)
        loud.event("theme_loaded", {"theme": "monokai"})

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["shown 2", "Loaded theme: monokai"]


def test_warning_includes_exception_summary(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("render failed", RuntimeError("bad token"))
    assert caplog.records[-1].getMessage() == "render failed (bad token)"
    assert caplog.records[-1].exc_info is None


def test_format_event_message() -> None:
    assert format_event_message("language_loaded", {"language": "shell", "alias": "bash"}) == (
        "Loaded language: shell (via bash)"
    )
    assert "plain-language" in format_event_message(
        "fallback", {"level": "plain-language", "language": "cobol"}
    )
    assert format_event_message("cache_hit", {"language": "python", "theme": "default"})
    assert format_event_message("unknown", {}) is None


def test_engine_error_carries_kind_and_chain() -> None:
    try:
        try:
            raise KeyError("missing")
        except KeyError as inner:
            raise EngineError(EngineErrorKind.OTHER, "render failed") from inner
    except EngineError as exc:
        assert exc.kind is EngineErrorKind.OTHER
        assert exception_messages(exc) == ["render failed", "'missing'"]

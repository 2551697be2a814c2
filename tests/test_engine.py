from __future__ import annotations

import pytest

from codesmith.core.dom import iter_lines
from codesmith.core.exceptions import EngineError, EngineErrorKind
from codesmith.highlight.engine import HighlightEngine, PygmentsEngine


SOURCE = "def answer():\n    return 42\n"


def test_pygments_engine_satisfies_protocol() -> None:
    assert isinstance(PygmentsEngine(), HighlightEngine)


@pytest.mark.asyncio
async def test_unknown_resources_raise_structured_errors() -> None:
    engine = PygmentsEngine()
    with pytest.raises(EngineError) as language_error:
        await engine.load_language("definitely-not-a-language")
    assert language_error.value.kind is EngineErrorKind.LANGUAGE_UNUSABLE

    with pytest.raises(EngineError) as theme_error:
        await engine.load_theme("definitely-not-a-theme")
    assert theme_error.value.kind is EngineErrorKind.THEME_NOT_FOUND


@pytest.mark.asyncio
async def test_render_requires_loaded_resources() -> None:
    engine = PygmentsEngine()
    with pytest.raises(EngineError) as missing_language:
        await engine.render(SOURCE, "python", "monokai")
    assert missing_language.value.kind is EngineErrorKind.LANGUAGE_UNUSABLE

    await engine.load_language("python")
    with pytest.raises(EngineError) as missing_theme:
        await engine.render(SOURCE, "python", "monokai")
    assert missing_theme.value.kind is EngineErrorKind.THEME_NOT_FOUND


@pytest.mark.asyncio
async def test_render_builds_line_structure() -> None:
    engine = PygmentsEngine()
    await engine.load_language("python")
    await engine.load_theme("monokai")

    soup = await engine.render(SOURCE, "python", "monokai")
    pre = soup.find("pre")

    assert pre is not None
    assert "codesmith" in pre["class"]
    assert pre["data-language"] == "python"
    assert pre["data-theme"] == "monokai"
    assert "background-color" in pre["style"]
    lines = iter_lines(pre)
    assert len(lines) == 2
    assert pre.find("code").get_text() == SOURCE.rstrip("\n")
    assert pre.find_all("span", style=True)


@pytest.mark.asyncio
async def test_plain_text_is_always_available() -> None:
    engine = PygmentsEngine()
    await engine.load_theme("default")
    soup = await engine.render("a < b\n\nc", "text", "default")
    lines = iter_lines(soup.find("pre"))
    assert [line.get_text() for line in lines] == ["a < b", "", "c"]
    assert "&lt;" in soup.decode()


@pytest.mark.asyncio
async def test_loads_are_idempotent() -> None:
    engine = PygmentsEngine()
    await engine.load_language("python")
    await engine.load_language("python")
    await engine.load_theme("default")
    await engine.load_theme("default")
    assert "python" in engine.loaded_languages
    assert engine.loaded_themes == frozenset({"default"})


def test_detect_language() -> None:
    engine = PygmentsEngine()
    assert engine.detect_language("#!/usr/bin/env python\nprint('hi')\n") == "python"
    assert engine.detect_language("   ") is None


def test_catalogues() -> None:
    engine = PygmentsEngine()
    assert "monokai" in engine.available_themes()
    assert "python" in engine.available_languages()

from __future__ import annotations

from bs4 import BeautifulSoup
import pytest

from codesmith.core.config import BlockConfig
from codesmith.core.dom import has_class, iter_lines
from codesmith.core.settings import HighlightSettings
from codesmith.highlight.structure import build_plain_structure
from codesmith.transformers import (
    PASS_ORDER,
    Pass,
    PassContext,
    TransformerRegistry,
    TransformerSelector,
    build_default_registry,
    default_registry,
    select_passes,
    transformer,
)


CODE = "first\nsecond\nthird\n"


def _names(config: BlockConfig, settings: HighlightSettings) -> list[str]:
    return [item.name for item in select_passes(config, settings)]


def _run(
    config: BlockConfig, settings: HighlightSettings, *, times: int = 1
) -> BeautifulSoup:
    soup = build_plain_structure(CODE, language=config.language)
    root = soup.find("pre")
    context = PassContext(
        soup=soup,
        config=config,
        settings=settings,
        code=CODE,
        language=config.language,
        theme="default",
    )
    for _ in range(times):
        for item in select_passes(config, settings):
            item(root, context)
    return soup


FULL_CONFIG = BlockConfig(
    language="python",
    highlight_lines=(2,),
    show_line_numbers=True,
    start_line_number=5,
    title="Example",
    filename="example.py",
    fold=True,
    exclude=True,
)
FULL_SETTINGS = HighlightSettings(enable_word_wrap=True)


def test_default_registry_follows_fixed_order() -> None:
    assert [item.name for item in default_registry.passes()] == list(PASS_ORDER)


def test_selection_keeps_fixed_order() -> None:
    assert _names(FULL_CONFIG, FULL_SETTINGS) == list(PASS_ORDER)


def test_selection_for_plain_block() -> None:
    settings = HighlightSettings(enable_language_label=False, enable_code_copy=False)
    assert _names(BlockConfig(language="python"), settings) == []


def test_line_numbers_follow_settings() -> None:
    settings = HighlightSettings(enable_line_numbers=True)
    assert "line-numbers" in _names(BlockConfig(), settings)


def test_fold_requires_folding_enabled() -> None:
    config = BlockConfig(unfold=True)
    assert "fold" in _names(config, HighlightSettings())
    assert "fold" not in _names(config, HighlightSettings(enable_folding=False))


def test_disabled_transformers_keep_only_exclude() -> None:
    settings = HighlightSettings(enable_transformers=False, enable_word_wrap=True)
    assert _names(FULL_CONFIG, settings) == ["exclude"]
    assert _names(BlockConfig(), settings) == []


def test_exclude_does_not_suppress_other_passes() -> None:
    names = _names(BlockConfig(exclude=True, title="x"), HighlightSettings())
    assert names == ["title", "language-label", "copy", "exclude"]


def test_selector_is_deterministic() -> None:
    selector = TransformerSelector(build_default_registry())
    first = selector.select(FULL_CONFIG, FULL_SETTINGS)
    second = selector.select(FULL_CONFIG, FULL_SETTINGS)
    assert first == second


def test_registry_rejects_duplicates_and_undecorated_handlers() -> None:
    registry = build_default_registry()
    with pytest.raises(ValueError):
        registry.register(Pass(name="copy", priority=1, handler=lambda _root, _ctx: None))

    def plain(_root, _context) -> None:
        return None

    with pytest.raises(TypeError):
        registry.register_handler(plain)


def test_custom_pass_is_collected() -> None:
    @transformer("shout", priority=5)
    def shout(root, _context) -> None:
        root["data-shout"] = "yes"

    registry = TransformerRegistry()
    item = registry.register_handler(shout)
    assert "shout" in registry
    assert len(registry) == 1
    assert item.applies(BlockConfig(), HighlightSettings())
    assert registry.describe() == [{"name": "shout", "priority": 5, "always": False}]


def test_passes_are_idempotent() -> None:
    once = _run(FULL_CONFIG, FULL_SETTINGS)
    twice = _run(FULL_CONFIG, FULL_SETTINGS, times=2)
    assert once.decode() == twice.decode()


def test_pass_effects() -> None:
    soup = _run(FULL_CONFIG, FULL_SETTINGS)
    root = soup.find("pre")
    lines = iter_lines(root)

    assert [has_class(line, "highlighted") for line in lines] == [False, True, False]
    numbers = [line.find("span", class_="line-number") for line in lines]
    assert [cell["data-line"] for cell in numbers] == ["5", "6", "7"]
    assert numbers[0].get_text() == "  5"
    assert has_class(root, "line-numbers")

    assert root["data-title"] == "Example"
    assert root["data-filename"] == "example.py"
    assert root.find("div", class_="codesmith-title").get_text() == "Example"

    assert root["data-language-label"] == "python"
    assert root["data-original-code"] == CODE
    button = root.find("button", class_="codesmith-copy")
    assert button["type"] == "button"
    assert button["aria-label"] == "Copy code"

    assert has_class(root, "foldable")
    assert has_class(root, "folded")
    assert root["data-fold-state"] == "folded"
    assert has_class(root, "word-wrap")
    assert has_class(root, "excluded")
    assert root.has_attr("hidden")


def test_unfold_marks_block_expanded() -> None:
    soup = _run(BlockConfig(unfold=True), HighlightSettings())
    root = soup.find("pre")
    assert has_class(root, "foldable")
    assert not has_class(root, "folded")
    assert root["data-fold-state"] == "unfolded"

from __future__ import annotations

from collections.abc import Iterator
import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from codesmith.cli import app
from codesmith.core.settings import HighlightSettings, SettingsStore, export_settings
from codesmith.core.user_dir import user_dir_context


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    logger = logging.getLogger("codesmith")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


def test_parse_prints_json(runner: CliRunner) -> None:
    result = runner.invoke(app, ["parse", 'py hl:1-2 title:"Demo" fold', "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["language"] == "python"
    assert payload["highlight_lines"] == [1, 2]
    assert payload["title"] == "Demo"
    assert payload["fold"] is True


def test_parse_reports_rejected_directives(runner: CliRunner) -> None:
    result = runner.invoke(app, ["parse", "python hl:abc"])

    assert result.exit_code == 0, result.output
    assert "language" in result.output
    assert "warning:" in result.output


def test_render_markdown_document(runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
    source = tmp_path / "doc.md"
    source.write_text("# Title\n\n```python hl:1\nprint('hi')\n```\n", encoding="utf-8")
    output = tmp_path / "out" / "doc.html"

    args = ["render", str(source), "-o", str(output), "--standalone"]
    result = runner.invoke(app, [*args, "--settings", str(settings_file)])

    assert result.exit_code == 0, result.output
    html = output.read_text(encoding="utf-8")
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>doc</title>" in html
    assert "codesmith-processed" in html
    assert "highlighted" in html
    assert "pre.codesmith {" in html
    assert settings_file.exists()


def test_render_html_to_stdout(runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
    source = tmp_path / "page.html"
    source.write_text(
        '<pre><code class="language-json">{"a": 1}</code></pre>', encoding="utf-8"
    )

    result = runner.invoke(
        app, ["render", str(source), "--mode", "light", "--settings", str(settings_file)]
    )

    assert result.exit_code == 0, result.output
    assert 'data-language="json"' in result.output
    assert 'data-theme="default"' in result.output


def test_inline_command(runner: CliRunner, settings_file: Path) -> None:
    result = runner.invoke(app, ["inline", "{py} x = 1", "--settings", str(settings_file)])

    assert result.exit_code == 0, result.output
    assert "span" in result.output


def test_inline_rejects_plain_text(runner: CliRunner) -> None:
    result = runner.invoke(app, ["inline", "just some words"])

    assert result.exit_code == 1
    assert "error:" in result.output


def test_settings_path_uses_user_dir(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("CODESMITH_HOME", str(tmp_path / "home"))
    with user_dir_context():
        result = runner.invoke(app, ["settings", "path"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(tmp_path / "home" / "settings.json")


def test_settings_show_heals_file(runner: CliRunner, settings_file: Path) -> None:
    settings_file.write_text(json.dumps({"max_cache_size": 0}), encoding="utf-8")

    result = runner.invoke(app, ["settings", "show", "--settings", str(settings_file)])

    assert result.exit_code == 0, result.output
    assert '"max_cache_size": 100' in result.output
    assert json.loads(settings_file.read_text(encoding="utf-8"))["max_cache_size"] == 100


def test_settings_export_and_import(
    runner: CliRunner, tmp_path: Path, settings_file: Path
) -> None:
    SettingsStore(settings_file).save(HighlightSettings(enable_word_wrap=True))
    snapshot = tmp_path / "shared.json"

    exported = runner.invoke(
        app, ["settings", "export", str(snapshot), "--settings", str(settings_file)]
    )
    assert exported.exit_code == 0, exported.output
    assert json.loads(snapshot.read_text(encoding="utf-8"))["enable_word_wrap"] is True

    target = tmp_path / "other.json"
    imported = runner.invoke(
        app, ["settings", "import", str(snapshot), "--settings", str(target)]
    )
    assert imported.exit_code == 0, imported.output
    assert SettingsStore(target).load().enable_word_wrap is True


def test_settings_import_rejects_incomplete_snapshot(
    runner: CliRunner, tmp_path: Path, settings_file: Path
) -> None:
    snapshot = tmp_path / "partial.json"
    snapshot.write_text(json.dumps({"default_theme": "monokai"}), encoding="utf-8")

    result = runner.invoke(
        app, ["settings", "import", str(snapshot), "--settings", str(settings_file)]
    )

    assert result.exit_code == 1
    assert "error:" in result.output
    assert not settings_file.exists()


def test_settings_reset(runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
    export_settings(HighlightSettings(debug_mode=True), settings_file)

    declined = runner.invoke(
        app, ["settings", "reset", "--settings", str(settings_file)], input="n\n"
    )
    assert declined.exit_code == 1
    assert SettingsStore(settings_file).load().debug_mode is True

    result = runner.invoke(app, ["settings", "reset", "--yes", "--settings", str(settings_file)])
    assert result.exit_code == 0, result.output
    assert SettingsStore(settings_file).load().debug_mode is False


def test_themes_lists_engine_styles(runner: CliRunner, settings_file: Path) -> None:
    result = runner.invoke(app, ["themes", "--settings", str(settings_file)])

    assert result.exit_code == 0, result.output
    assert "monokai" in result.output
    assert "github-dark" in result.output


def test_languages_lists_aliases(runner: CliRunner) -> None:
    result = runner.invoke(app, ["languages"])
    assert result.exit_code == 0, result.output
    assert "python" in result.output
    assert "typescript" in result.output

    everything = runner.invoke(app, ["languages", "--all"])
    assert everything.exit_code == 0, everything.output
    assert "python" in everything.output.splitlines()

"""Implementation of the `codesmith render`, `parse` and `inline` commands."""

from __future__ import annotations

import asyncio
from html import escape
import json
from pathlib import Path

from rich import box
from rich.table import Table
import typer

from ...adapters.markdown import render_markdown
from ...adapters.processor import CodeProcessor
from ...adapters.stylesheet import build_stylesheet
from ...core.parser import parse_annotation_details, parse_inline
from ...highlight.pipeline import ThemeMode
from ..state import build_pipeline, emit_error, emit_warning, get_cli_state, load_settings


MARKDOWN_SUFFIXES = frozenset({".md", ".markdown", ".mdown", ".mkd"})

SettingsOption = typer.Option(
    None,
    "--settings",
    help="Read settings from this JSON file instead of the user directory.",
    dir_okay=False,
    resolve_path=True,
)


def _standalone(body: str, stylesheet: str, title: str) -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{escape(title)}</title>\n<style>\n{stylesheet}</style>\n"
        f"</head>\n<body>\n{body}\n</body>\n</html>\n"
    )


def render(
    input_path: Path = typer.Argument(
        ...,
        metavar="INPUT",
        help="Markdown or HTML document to highlight.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the result to this file instead of stdout.",
        dir_okay=False,
        resolve_path=True,
    ),
    mode: ThemeMode | None = typer.Option(
        None,
        "--mode",
        case_sensitive=False,
        help="Display mode selecting the light or dark default theme.",
    ),
    standalone: bool = typer.Option(
        False,
        "--standalone/--fragment",
        help="Wrap the result in a complete HTML page with the generated stylesheet.",
    ),
    settings_path: Path | None = SettingsOption,
) -> None:
    """Highlight every code fragment of a Markdown or HTML document."""
    settings = load_settings(settings_path)
    pipeline = build_pipeline(settings)
    pipeline.set_display_mode(mode)
    processor = CodeProcessor(pipeline)

    source = input_path.read_text(encoding="utf-8")
    is_markdown = input_path.suffix.lower() in MARKDOWN_SUFFIXES

    async def _run() -> str:
        await pipeline.initialize()
        if is_markdown:
            return await render_markdown(source, processor)
        return await processor.process_html(source)

    body = asyncio.run(_run())
    if standalone:
        body = _standalone(body, build_stylesheet(settings), input_path.stem)

    if output is None:
        typer.echo(body, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(body, encoding="utf-8")
    get_cli_state().err_console.print(f"[green]Wrote[/] {output}")


def parse(
    annotation: str = typer.Argument(
        ...,
        help="Fence annotation, e.g. 'python hl:1-3 title:\"Example\" fold'.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the configuration as JSON."),
) -> None:
    """Show the configuration described by a fence annotation."""
    result = parse_annotation_details(annotation)
    if as_json:
        typer.echo(json.dumps(result.config.describe(), indent=2))
    else:
        table = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold")
        table.add_column("Option", style="cyan", no_wrap=True)
        table.add_column("Value")
        for name, value in result.config.describe().items():
            table.add_row(name, "" if value is None else str(value))
        get_cli_state().console.print(table)

    for warning in result.warnings:
        emit_warning(warning)


def inline(
    text: str = typer.Argument(
        ...,
        help="Inline shorthand such as '{py} print(1)', 'js: x()' or '[ts] let a'.",
    ),
    settings_path: Path | None = SettingsOption,
) -> None:
    """Highlight an inline code shorthand and print the markup."""
    fragment = parse_inline(text)
    if fragment is None:
        emit_error("Text does not use an inline code shorthand.")
        raise typer.Exit(code=1)

    pipeline = build_pipeline(load_settings(settings_path))
    markup = asyncio.run(pipeline.highlight_inline(fragment.code, fragment.language))
    typer.echo(markup)


__all__ = ["inline", "parse", "render"]

"""Implementation of the `codesmith themes` and `codesmith languages` commands."""

from __future__ import annotations

from pathlib import Path

from rich import box
from rich.table import Table
import typer

from ...core.languages import LANGUAGE_ALIASES, SUPPORTED_LANGUAGES
from ...highlight.engine import PygmentsEngine
from ..state import get_cli_state, load_settings
from .render import SettingsOption


def themes(settings_path: Path | None = SettingsOption) -> None:
    """List the available themes, marking the configured defaults."""
    settings = load_settings(settings_path)
    roles: dict[str, list[str]] = {}
    for role, name in (
        ("default", settings.default_theme),
        ("dark", settings.default_dark_theme),
        ("light", settings.default_light_theme),
    ):
        roles.setdefault(name, []).append(role)
    preloaded = set(settings.themes)

    table = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold")
    table.add_column("Theme", style="cyan", no_wrap=True)
    table.add_column("Role")
    table.add_column("Preloaded", justify="center")
    for name in PygmentsEngine().available_themes():
        table.add_row(name, ", ".join(roles.get(name, [])), "yes" if name in preloaded else "")
    get_cli_state().console.print(table)


def languages(
    show_all: bool = typer.Option(
        False,
        "--all",
        help="List every language known to the highlighting engine.",
    ),
) -> None:
    """List the supported languages and their aliases."""
    state = get_cli_state()
    if show_all:
        for name in PygmentsEngine().available_languages():
            typer.echo(name)
        return

    aliases: dict[str, list[str]] = {}
    for alias, target in LANGUAGE_ALIASES.items():
        aliases.setdefault(target, []).append(alias)

    table = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold")
    table.add_column("Language", style="cyan", no_wrap=True)
    table.add_column("Aliases")
    for name in SUPPORTED_LANGUAGES:
        table.add_row(name, ", ".join(sorted(aliases.get(name, []))))
    state.console.print(table)


__all__ = ["languages", "themes"]

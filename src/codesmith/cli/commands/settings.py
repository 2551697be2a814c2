"""Implementation of the `codesmith settings` command group."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from ...core.exceptions import SettingsImportError
from ...core.settings import SettingsStore, export_settings, import_settings
from ..state import emit_error, get_cli_state


settings_app = typer.Typer(
    help="Inspect and manage the persisted highlighting settings.",
    context_settings={"help_option_names": ["--help"]},
)

StoreOption = typer.Option(
    None,
    "--settings",
    help="Operate on this JSON file instead of the user directory.",
    dir_okay=False,
    resolve_path=True,
)


@settings_app.command(name="show")
def show(settings_path: Path | None = StoreOption) -> None:
    """Print the effective settings as JSON."""
    settings = SettingsStore(settings_path).load()
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


@settings_app.command(name="path")
def path(settings_path: Path | None = StoreOption) -> None:
    """Print the location of the settings file."""
    typer.echo(str(SettingsStore(settings_path).path))


@settings_app.command(name="export")
def export(
    destination: Path = typer.Argument(
        ...,
        help="File receiving the settings snapshot.",
        dir_okay=False,
        resolve_path=True,
    ),
    settings_path: Path | None = StoreOption,
) -> None:
    """Write a shareable snapshot of the current settings."""
    settings = SettingsStore(settings_path).load()
    export_settings(settings, destination)
    get_cli_state().err_console.print(f"[green]Exported settings to[/] {destination}")


@settings_app.command(name="import")
def import_(
    source: Path = typer.Argument(
        ...,
        help="Snapshot previously written by `codesmith settings export`.",
        exists=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
    settings_path: Path | None = StoreOption,
) -> None:
    """Replace the current settings with an exported snapshot."""
    try:
        settings = import_settings(source)
    except SettingsImportError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    store = SettingsStore(settings_path)
    store.save(settings)
    get_cli_state().err_console.print(f"[green]Imported settings into[/] {store.path}")


@settings_app.command(name="reset")
def reset(
    settings_path: Path | None = StoreOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Restore the default settings."""
    store = SettingsStore(settings_path)
    if not yes:
        typer.confirm(f"Reset settings stored in {store.path}?", abort=True)
    store.reset()
    get_cli_state().err_console.print("[green]Settings restored to defaults.[/]")


__all__ = ["settings_app"]

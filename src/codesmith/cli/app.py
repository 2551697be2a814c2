"""Typer application wiring for the codesmith CLI."""

from __future__ import annotations

from rich.traceback import Traceback
import typer

from .commands import inline, languages, parse, render, settings_app, themes
from .state import configure_logging, debug_enabled, emit_error, get_cli_state, set_cli_state


app = typer.Typer(
    help="Highlight annotated code fragments in Markdown and HTML documents.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)

app.add_typer(settings_app, name="settings")


@app.callback()
def _app_root(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help=("Increase CLI verbosity. Combine multiple times for additional diagnostics."),
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Show full tracebacks and debug diagnostics.",
    ),
) -> None:
    ctx.obj = get_cli_state()
    set_cli_state(verbosity=verbose, debug=debug)
    configure_logging()


app.command(name="render")(render)
app.command(name="parse")(parse)
app.command(name="inline")(inline)
app.command(name="themes")(themes)
app.command(name="languages")(languages)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - catch-all
        state = get_cli_state()
        if state.show_tracebacks:
            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]

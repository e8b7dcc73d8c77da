"""Typer application shared by all CLI commands."""

import typer

from stocklens import __version__

app = typer.Typer(
    name="stocklens",
    help="Technical signals, fundamental screening, backtests and sentiment for stocks",
    no_args_is_help=True,
)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"StockLens v{__version__}")
        raise typer.Exit()


@app.callback()
def version_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    """Show version information."""


def main() -> None:
    """Main entry point for CLI."""
    app()

from __future__ import annotations

import typer

from relctl import __version__
from relctl.cli.commands.collaborate_cmd import collaborate
from relctl.cli.commands.migrate_cmd import migrate
from relctl.cli.commands.promote_cmd import promote


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(promote)
app.command()(migrate)
app.command()(collaborate)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    del version


def main() -> None:
    app()

"""
Main CLI Application
Typer application with the convert and formats commands
"""

from typing import Annotated, Optional

import typer

from imgconv.cli import __version__
from imgconv.cli.commands import convert, formats
from imgconv.cli.utils.console import console
from imgconv.config import get_settings
from imgconv.utils.logging import configure_from_settings

app = typer.Typer(
    name="imgconv",
    help="Convert images between JPEG, PNG, WebP and AVIF",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool], typer.Option("--version", "-v", help="Show version")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log each conversion step")
    ] = False,
    debug: Annotated[
        bool, typer.Option("--debug", help="Enable debug logging")
    ] = False,
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Render logs as JSON")
    ] = False,
):
    """
    Image format converter

    Supports: JPG/JPEG, PNG, WebP, AVIF

    [bold green]Examples:[/bold green]

      [cyan]imgconv convert image.png image.webp[/cyan]
      [cyan]imgconv convert input.jpg output.avif[/cyan]
      [cyan]imgconv convert --batch ./input ./output webp[/cyan]
    """
    if version:
        console.print(f"imgconv {__version__}")
        raise typer.Exit()

    log_level = None
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    configure_from_settings(
        get_settings(), log_level=log_level, json_logs=json_logs or None
    )

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


app.command(name="convert", no_args_is_help=True)(convert.convert_image)
app.add_typer(
    formats.app, name="formats", help="Supported formats", no_args_is_help=True
)


if __name__ == "__main__":
    app()

"""
Formats Command
List supported image formats
"""

import typer
from rich.table import Table

from imgconv.cli.utils.console import console, err_console
from imgconv.cli.utils.errors import error_handler
from imgconv.core.conversion.formats.avif_handler import AVIF_AVAILABLE
from imgconv.core.exceptions import UnsupportedFormatError
from imgconv.core.formats import SupportedFormat, parse_format

app = typer.Typer(no_args_is_help=True)

DESCRIPTIONS = {
    SupportedFormat.JPEG: "Joint Photographic Experts Group",
    SupportedFormat.PNG: "Portable Network Graphics",
    SupportedFormat.WEBP: "Modern web image format",
    SupportedFormat.AVIF: "AV1 Image File Format",
}


def _available(fmt: SupportedFormat) -> bool:
    return fmt is not SupportedFormat.AVIF or AVIF_AVAILABLE


@app.command(name="list")
def formats_list() -> None:
    """
    List all supported image formats

    Examples:
      imgconv formats list
    """
    table = Table(title="Supported Image Formats", show_header=True)
    table.add_column("Format", style="cyan")
    table.add_column("Extensions", style="green")
    table.add_column("Output name", style="yellow")
    table.add_column("Available")
    table.add_column("Description", style="dim")

    for fmt in SupportedFormat:
        table.add_row(
            fmt.pillow_format,
            ", ".join(fmt.aliases),
            f"*.{fmt.extension}",
            "✓" if _available(fmt) else "✗",
            DESCRIPTIONS[fmt],
        )

    console.print(table)


@app.command(name="info")
def formats_info(
    format_name: str,
) -> None:
    """
    Show details about a format

    Examples:
      imgconv formats info webp
      imgconv formats info jpeg
    """
    try:
        fmt = parse_format(format_name)
    except UnsupportedFormatError as e:
        error_handler.handle(e, err_console)
        raise typer.Exit(1)

    console.print(f"[cyan]Format: {fmt.pillow_format}[/cyan]")

    info_table = Table(show_header=False, box=None)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")

    info_table.add_row("Extensions", ", ".join(fmt.aliases))
    info_table.add_row("Canonical extension", fmt.extension)
    info_table.add_row("Compression", "Lossy" if fmt.is_lossy else "Lossless")
    info_table.add_row("Uses quality", "Yes" if fmt.is_lossy else "No")
    info_table.add_row("Available", "Yes" if _available(fmt) else "No")

    console.print(info_table)


@app.callback()
def formats_callback() -> None:
    """Supported formats"""

"""
Convert Command
Single image conversion and directory batch conversion
"""

from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.markup import escape

from imgconv.cli.utils.console import console, err_console
from imgconv.cli.utils.errors import error_handler
from imgconv.config import get_settings
from imgconv.core.batch.models import BatchItem, BatchItemStatus
from imgconv.core.conversion.engine import ConversionEngine
from imgconv.core.exceptions import ImageConverterError
from imgconv.core.formats import format_from_path, parse_format


def convert_image(
    source: Annotated[
        Path, typer.Argument(help="Input file, or input directory with --batch")
    ],
    destination: Annotated[
        Path, typer.Argument(help="Output file, or output directory with --batch")
    ],
    format: Annotated[
        Optional[str],
        typer.Argument(help="Target format for --batch (jpg, png, webp, avif)"),
    ] = None,
    batch: Annotated[
        bool, typer.Option("--batch", "-b", help="Convert every image in a directory")
    ] = False,
    quality: Annotated[
        Optional[int],
        typer.Option(
            "-q", "--quality", help="Quality for lossy formats (0-100, clamped)"
        ),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option(
            "-j", "--workers", min=1, help="Files converted in parallel (--batch)"
        ),
    ] = None,
    report_skipped: Annotated[
        bool,
        typer.Option(
            "--report-skipped", help="List files skipped for their extension (--batch)"
        ),
    ] = False,
):
    """
    Convert an image, or a directory of images, to another format

    Examples:
      imgconv convert image.png image.webp
      imgconv convert input.jpg output.avif -q 70
      imgconv convert --batch ./input ./output webp
    """
    engine = ConversionEngine.from_settings(
        get_settings(),
        quality=quality,
        max_workers=workers,
        report_skipped=report_skipped or None,
    )

    if batch:
        _convert_directory(engine, source, destination, format)
    else:
        _convert_file(engine, source, destination, format)


def _fail(error: Exception) -> NoReturn:
    error_handler.handle(error, err_console)
    raise typer.Exit(1)


def _convert_file(
    engine: ConversionEngine,
    input_path: Path,
    output_path: Path,
    format: Optional[str],
) -> None:
    if format is not None:
        err_console.print(
            "[red]Error: The format argument is only used with --batch; "
            "single files take their format from the output extension[/red]"
        )
        raise typer.Exit(1)

    if not input_path.exists():
        err_console.print(
            f"[red]Error: Input file does not exist: {escape(str(input_path))}[/red]"
        )
        raise typer.Exit(1)

    try:
        target_format = format_from_path(output_path)
    except ImageConverterError as e:
        _fail(e)

    console.print(f"Loading image: {escape(str(input_path))}")
    try:
        result = engine.convert(input_path, output_path, target_format)
    except ImageConverterError as e:
        _fail(e)

    console.print(f"Image dimensions: {result.width}x{result.height}")
    console.print(f"Converted to {target_format.extension} format")
    console.print(
        f"[green]Conversion completed:[/green] {escape(str(result.output_path))}"
    )


def _convert_directory(
    engine: ConversionEngine,
    input_dir: Path,
    output_dir: Path,
    format: Optional[str],
) -> None:
    if format is None:
        err_console.print(
            "[red]Error: Batch mode requires a target format, "
            "e.g. imgconv convert --batch ./input ./output webp[/red]"
        )
        raise typer.Exit(1)

    try:
        target_format = parse_format(format)
    except ImageConverterError as e:
        _fail(e)

    if not input_dir.is_dir():
        err_console.print(
            "[red]Error: Input directory does not exist or is not a directory: "
            f"{escape(str(input_dir))}[/red]"
        )
        raise typer.Exit(1)

    try:
        result = engine.batch_convert(
            input_dir, output_dir, target_format, on_item=_print_item
        )
    except ImageConverterError as e:
        _fail(e)

    console.print(
        f"\n[bold]Batch conversion completed![/bold] "
        f"{result.converted_count} files converted."
    )
    if result.failures:
        console.print(f"[red]{result.failed_count} files failed.[/red]")
    if result.skipped:
        console.print(f"[dim]{len(result.skipped)} files skipped.[/dim]")


def _print_item(item: BatchItem) -> None:
    if item.status == BatchItemStatus.COMPLETED:
        console.print(
            f"[green]✓ Converted:[/green] {escape(item.filename)} "
            f"[dim]({item.width}x{item.height})[/dim]"
        )
    elif item.status == BatchItemStatus.FAILED:
        err_console.print(
            f"[red]✗ Failed to convert[/red] {escape(str(item.input_path))}: "
            f"{escape(item.error_message or '')}"
        )
    else:
        console.print(f"[yellow]- Skipped:[/yellow] {escape(item.filename)}")

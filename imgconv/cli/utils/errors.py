"""
Error Handling Utilities
Error panels with suggestions
"""

from difflib import get_close_matches
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from imgconv.core.exceptions import (
    DecodeError,
    DirectoryError,
    EncodeError,
    FileIOError,
    ImageConverterError,
    UnsupportedFormatError,
    ValidationError,
)
from imgconv.core.formats import supported_extensions


class ErrorHandler:
    """Renders errors with helpful suggestions"""

    def __init__(self):
        self.known_formats = supported_extensions()

    def suggest_format(self, incorrect: str) -> Optional[str]:
        """Suggest a similar format"""
        matches = get_close_matches(
            incorrect.lower().lstrip("."), self.known_formats, n=1, cutoff=0.6
        )
        return matches[0] if matches else None

    def suggestions_for(self, error: Exception) -> List[str]:
        suggestions = []

        if isinstance(error, UnsupportedFormatError):
            suggestion = self.suggest_format(error.requested_format)
            if suggestion:
                suggestions.append(f"Did you mean format: {suggestion}?")
            suggestions.append(f"Supported formats: {', '.join(self.known_formats)}")

        elif isinstance(error, ValidationError):
            suggestions.append(
                "Give the output file an extension, e.g. photo.webp or photo.avif"
            )

        elif isinstance(error, DirectoryError):
            suggestions.append("Check that the directories exist and are writable")

        elif isinstance(error, FileIOError):
            suggestions.append("Check if the file or directory exists")
            suggestions.append("Verify the path is correct")

        elif isinstance(error, DecodeError):
            suggestions.append(
                "The input must be a valid JPEG, PNG, WebP or AVIF image"
            )

        elif isinstance(error, EncodeError):
            suggestions.append("Check free disk space and output permissions")

        return suggestions

    def handle(self, error: Exception, console: Console) -> None:
        """Print an error panel with suggestions"""
        if isinstance(error, ImageConverterError):
            title = f"{type(error).__name__} ({error.error_code})"
            message = error.message
        else:
            title = type(error).__name__
            message = str(error)

        panel_content = Text()
        panel_content.append("Error: ", style="bold red")
        panel_content.append(message)

        suggestions = self.suggestions_for(error)
        if suggestions:
            panel_content.append("\n\n")
            panel_content.append("Suggestions:", style="bold yellow")
            for suggestion in suggestions:
                panel_content.append(f"\n  • {suggestion}")

        panel_content.append("\n\n")
        panel_content.append("For more help: imgconv --help", style="dim")

        console.print(
            Panel(
                panel_content,
                title=f"[bold red]{title}[/bold red]",
                border_style="red",
                padding=(1, 2),
            )
        )


error_handler = ErrorHandler()

"""
Error Handler - Error panels with context and suggestions.

This module provides consistent error display across the CLI and the
mapping from errors to process exit codes.
"""

import traceback
from typing import List, Optional

from rich.panel import Panel

from aniverse.core.exceptions import (
    AniverseError,
    ConfigurationError,
    CryptoFailure,
    DecodeFailure,
    ExtractionError,
    InvalidArgument,
    NetworkError,
    NoMatchFound,
    ParseFailure,
    PluginError,
    http_status_for,
)
from aniverse.ui.console import Palette, get_error_console


EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def exit_code_for(error: BaseException) -> int:
    """Process exit code for an error."""
    if isinstance(error, KeyboardInterrupt):
        return EXIT_INTERRUPTED
    if isinstance(error, InvalidArgument):
        return EXIT_USAGE
    return EXIT_FAILURE


class ErrorHandler:
    """Handles error display with consistent formatting and helpful context."""

    def __init__(self):
        self.console = get_error_console()

    def handle_error(
        self,
        error: BaseException,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """
        Handle and display an error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Additional context about where the error occurred
            show_traceback: Whether to show the full traceback
        """
        if isinstance(error, AniverseError):
            title, lines, suggestions = self._describe_aniverse_error(error)
        else:
            title = "💥 Unexpected Error"
            lines = [f"[{Palette.error}]{error.__class__.__name__}: {error}[/{Palette.error}]"]
            suggestions = [
                "Check the command syntax and arguments",
                "Run again with [cyan]--debug[/cyan] for details",
            ]

        if context:
            lines.append(f"[dim]Context:[/dim] {context}")

        if show_traceback:
            if isinstance(error, AniverseError) and error.details:
                lines.append(f"\n[dim]Details:[/dim]\n{error.details}")
            lines.append(f"\n[dim]Traceback:[/dim]\n{''.join(traceback.format_exception(type(error), error, error.__traceback__))}")

        self._print_panel(title, lines, suggestions)

    def _describe_aniverse_error(self, error: AniverseError):
        lines = [f"[{Palette.error}]{error.message}[/{Palette.error}]"]
        suggestions: List[str] = []

        if isinstance(error, InvalidArgument):
            title = "✋ Invalid Argument"
            if error.field_name:
                lines.append(f"[dim]Argument:[/dim] [cyan]{error.field_name}[/cyan]")
            suggestions.append("Check the command syntax with [cyan]--help[/cyan]")
        elif isinstance(error, NetworkError):
            title = "🌐 Network Error"
            if error.url:
                lines.append(f"[dim]URL:[/dim] [blue]{error.url}[/blue]")
            if error.http_status:
                lines.append(f"[dim]Status Code:[/dim] {error.http_status}")
            suggestions.extend([
                "Check your internet connection",
                "Verify the provider website is accessible",
            ])
            if error.http_status == 404:
                suggestions.insert(0, "The requested content may no longer be available")
            elif error.http_status and error.http_status >= 500:
                suggestions.insert(0, "The provider is experiencing issues")
        elif isinstance(error, NoMatchFound):
            title = "🔍 Not Found"
            if error.query:
                lines.append(f"[dim]Query:[/dim] [cyan]{error.query}[/cyan]")
            suggestions.append("Try a different title or id")
        elif isinstance(error, ConfigurationError):
            title = "⚙️  Configuration Error"
            if error.config_path:
                lines.append(f"[dim]Configuration file:[/dim] [cyan]{error.config_path}[/cyan]")
            suggestions.append("Reset to defaults with [cyan]aniverse config reset[/cyan]")
        elif isinstance(error, PluginError):
            title = "🔌 Plugin Error"
            if error.plugin_name:
                lines.append(f"[dim]Plugin:[/dim] [cyan]{error.plugin_name}[/cyan]")
            suggestions.append("The provider may have changed its pages")
        elif isinstance(error, (CryptoFailure, DecodeFailure, ExtractionError, ParseFailure)):
            title = "🎞️  Extraction Error"
            if isinstance(error, ParseFailure) and error.line:
                lines.append(f"[dim]Line:[/dim] {error.line}")
            suggestions.append("The provider may have rotated its keys or changed its player")
        else:
            title = "❌ Error"

        lines.append(f"[dim]Status:[/dim] {http_status_for(error)}")
        return title, lines, suggestions

    def _print_panel(self, title: str, lines: List[str], suggestions: List[str]) -> None:
        content = list(lines)
        if suggestions:
            content.append(f"\n[{Palette.info}]💡 Suggestions:[/{Palette.info}]")
            content.extend(f"• {suggestion}" for suggestion in suggestions)

        panel = Panel(
            "\n".join(content),
            title=title,
            border_style=Palette.error,
            padding=(1, 2)
        )
        self.console.print(panel)

    def display_warning(self, message: str, title: str = "⚠️  Warning") -> None:
        """Display a warning message."""
        panel = Panel(
            f"[{Palette.warning}]{message}[/{Palette.warning}]",
            title=f"[{Palette.warning}]{title}[/{Palette.warning}]",
            border_style=Palette.warning,
            padding=(1, 2)
        )
        self.console.print(panel)


def handle_error(
    error: BaseException,
    context: Optional[str] = None,
    show_traceback: bool = False
) -> int:
    """
    Display an error and return the exit code it maps to.

    Args:
        error: Exception to handle
        context: Additional context
        show_traceback: Whether to show traceback
    """
    ErrorHandler().handle_error(error, context, show_traceback)
    return exit_code_for(error)


def display_warning(message: str, title: str = "⚠️  Warning") -> None:
    """Display a warning message on stderr."""
    ErrorHandler().display_warning(message, title)


# Export error handling functions
__all__ = [
    "ErrorHandler",
    "handle_error",
    "display_warning",
    "exit_code_for",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "EXIT_INTERRUPTED",
]

"""
UI Layer - Rich console, components and error presentation.

This module contains the Rich renderables and error panels used by the
CLI commands.
"""

from aniverse.ui.components import UIComponents
from aniverse.ui.console import Palette, get_console, get_error_console, setup_console
from aniverse.ui.error_handler import (
    ErrorHandler,
    display_warning,
    exit_code_for,
    handle_error,
)

__all__ = [
    # Core UI Components
    "UIComponents",
    # Console Management
    "Palette",
    "get_console",
    "get_error_console",
    "setup_console",
    # Error Handling
    "ErrorHandler",
    "handle_error",
    "display_warning",
    "exit_code_for",
]

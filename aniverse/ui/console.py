"""
Rich consoles shared by the CLI.

Results go to stdout and error panels to stderr, which keeps ``--json``
output parseable even when a command fails.
"""

from typing import Optional

from rich.console import Console


_stdout: Optional[Console] = None
_stderr: Optional[Console] = None


class Palette:
    """Style names used across the UI."""

    primary = "bold cyan"
    secondary = "magenta"
    accent = "green"
    muted = "dim"
    border = "blue"
    error = "red"
    warning = "yellow"
    info = "cyan"


def setup_console(no_color: bool = False) -> Console:
    """(Re)create both consoles and return the stdout one."""
    global _stdout, _stderr

    _stdout = Console(no_color=no_color, legacy_windows=False)
    _stderr = Console(stderr=True, no_color=no_color, legacy_windows=False)
    return _stdout


def get_console() -> Console:
    if _stdout is None:
        setup_console()
    return _stdout


def get_error_console() -> Console:
    if _stderr is None:
        setup_console()
    return _stderr


__all__ = [
    "Palette",
    "setup_console",
    "get_console",
    "get_error_console",
]

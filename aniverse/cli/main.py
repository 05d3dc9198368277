"""
CLI Main Application - Typer app entry point.

This module provides the main CLI application entry point: global
options, logging setup, configuration loading and command registration.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.traceback import install as install_rich_traceback

from aniverse import __version__
from aniverse.cli.commands import anime, config
from aniverse.cli.context import CLIOptions, get_config_manager, set_config_manager, set_options
from aniverse.core.config_manager import ConfigManager
from aniverse.core.exceptions import AniverseError
from aniverse.ui import get_console, handle_error, setup_console
from aniverse.ui.error_handler import EXIT_INTERRUPTED


# Root command
app = typer.Typer(
    name="aniverse",
    help="🎌 Cross-provider anime metadata and stream resolution",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        get_console().print(f"[bold blue]Aniverse[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version information and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory path",
        file_okay=False,
        dir_okay=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed logging",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON",
    ),
) -> None:
    """
    🎌 Aniverse - anime metadata and streams across providers.

    Works are addressed by their AniList id; streams are resolved from
    the scraping provider and episode titles from MyAnimeList.
    """
    set_options(CLIOptions(debug=debug, json_output=json_output))
    setup_console()

    try:
        _initialize_application(config_dir=config_dir, debug=debug)
    except AniverseError as e:
        code = handle_error(e, "During application initialization", show_traceback=debug)
        raise typer.Exit(code) from e


def _initialize_application(config_dir: Optional[Path] = None, debug: bool = False) -> None:
    """
    Load configuration and set up logging.

    Args:
        config_dir: Configuration directory override
        debug: Enable debug mode
    """
    if debug:
        install_rich_traceback(show_locals=True)

    config_manager = ConfigManager(config_dir or Path("config"))
    set_config_manager(config_manager)

    level = "DEBUG" if debug else config_manager.settings.logging.level
    _setup_logging(level)


def _setup_logging(level: str = "INFO") -> None:
    """
    Set up application logging.

    Args:
        level: Root logger level name
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )

    # Keep aiohttp quiet unless debugging
    if numeric_level > logging.DEBUG:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _register_commands() -> None:
    """Register commands and command groups with the main app."""
    anime.register(app)
    app.add_typer(config.app, name="config", help="⚙️  Manage configuration")


# Registered at import time so --help lists every command
_register_commands()


def cli_main() -> None:
    """
    Main CLI entry point for the aniverse command.

    This function is called when the user runs 'aniverse' from the command line.
    """
    try:
        app()
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        sys.exit(handle_error(e, "Unexpected error in CLI"))


# Export main components
__all__ = [
    "app",
    "cli_main",
    "get_config_manager",
]

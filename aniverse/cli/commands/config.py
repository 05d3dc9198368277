"""
Configuration Command - Settings management functionality.

This module implements the ``config`` command group for inspecting and
updating application settings with validation.
"""

import json
from typing import Any, Optional

import typer
from rich.prompt import Confirm

from aniverse.cli.context import get_config_manager, get_options
from aniverse.core.exceptions import ConfigurationError
from aniverse.ui import get_console, handle_error


# Create config command group
app = typer.Typer(
    name="config",
    help="⚙️  Manage application configuration and settings",
    no_args_is_help=True,
)


def _parse_value(raw: str) -> Any:
    """Interpret a command-line value as JSON when possible, else as a string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command(name="show")
def show_config(
    section: Optional[str] = typer.Argument(
        None,
        help="Configuration section to display (network, providers, extraction, resolver, logging)"
    ),
) -> None:
    """📋 Display current configuration."""
    config_manager = get_config_manager()

    if section is None:
        data = config_manager.settings.model_dump()
    else:
        data = config_manager.get_setting(section)
        if data is None:
            code = handle_error(ConfigurationError(f"Unknown configuration section: {section}"))
            raise typer.Exit(code)

    get_console().print_json(data=data)


@app.command(name="get")
def get_config(
    key: str = typer.Argument(..., help="Configuration key (dot notation)"),
) -> None:
    """🔎 Print one configuration value."""
    value = get_config_manager().get_setting(key)
    if value is None:
        code = handle_error(ConfigurationError(f"Unknown setting: {key}"))
        raise typer.Exit(code)

    if get_options().json_output or isinstance(value, (dict, list)):
        get_console().print_json(data=value)
    else:
        get_console().print(str(value))


@app.command(name="set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key (dot notation)"),
    value: str = typer.Argument(..., help="New value for the setting"),
) -> None:
    """
    🔧 Set a configuration value.

    Example: aniverse config set network.timeout 60
    """
    try:
        get_config_manager().update_setting(key, _parse_value(value))
    except ConfigurationError as e:
        code = handle_error(e, f"Failed to set configuration value '{key}'")
        raise typer.Exit(code) from e

    get_console().print(f"[green]✓[/green] {key} updated")


@app.command(name="reset")
def reset_config(
    confirm: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    ),
) -> None:
    """🔄 Reset configuration to defaults."""
    if not confirm and not Confirm.ask(
        "[bold red]⚠️  This will reset ALL configuration to defaults. Continue?[/bold red]",
        default=False
    ):
        get_console().print("Configuration reset cancelled.")
        return

    try:
        get_config_manager().reset_to_defaults()
    except ConfigurationError as e:
        code = handle_error(e, "Failed to reset configuration")
        raise typer.Exit(code) from e

    get_console().print("[green]✓[/green] Configuration reset to defaults")


# Export command group
__all__ = ["app"]

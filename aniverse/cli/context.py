"""
CLI Context - state shared between the main callback and the commands.

The main callback stores the loaded configuration and the global flags
here; commands read them back without importing ``cli.main``.
"""

from typing import Optional

from pydantic import BaseModel

from aniverse.core.config_manager import ConfigManager


class CLIOptions(BaseModel):
    """Flags given before the command name."""

    debug: bool = False
    json_output: bool = False


_state = {
    "config_manager": None,
    "options": CLIOptions(),
}


def get_config_manager() -> ConfigManager:
    manager: Optional[ConfigManager] = _state["config_manager"]
    if manager is None:
        raise RuntimeError("Configuration has not been loaded yet")
    return manager


def set_config_manager(config_manager: ConfigManager) -> None:
    _state["config_manager"] = config_manager


def get_options() -> CLIOptions:
    return _state["options"]


def set_options(options: CLIOptions) -> None:
    _state["options"] = options


__all__ = [
    "CLIOptions",
    "get_config_manager",
    "set_config_manager",
    "get_options",
    "set_options",
]

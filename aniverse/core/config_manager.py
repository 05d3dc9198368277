"""
Configuration Manager - persisted application settings.

Settings live in one ``settings.json`` document inside the configuration
directory. The manager validates it against :class:`AppSettings`, writes
defaults when the document is missing, sets a corrupt document aside and
offers dot-path reads and writes for the ``config`` commands.
"""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from aniverse.core.config_schemas import AppSettings
from aniverse.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"
BACKUP_SUFFIX = ".json.backup"


def _split_path(key_path: str) -> List[str]:
    parts = [part for part in key_path.split(".") if part]
    if not parts:
        raise ConfigurationError(f"Empty setting path: '{key_path}'")
    return parts


class ConfigManager:
    """
    Owns the settings document of one configuration directory.

    Reads and writes go through a lock so the CLI and background tasks
    always observe a complete, validated :class:`AppSettings`.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            config_dir: Directory holding ``settings.json``; created when
                missing. Defaults to ``./config``.
        """
        self.config_dir = Path(config_dir or "config")
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._lock = Lock()
        self._settings: Optional[AppSettings] = None
        self._settings = self._load()

    @property
    def settings_file(self) -> Path:
        return self.config_dir / SETTINGS_FILE_NAME

    @property
    def settings(self) -> AppSettings:
        """The validated settings currently in effect."""
        with self._lock:
            if self._settings is None:
                self._settings = self._load()
            return self._settings

    # Persistence

    def _load(self) -> AppSettings:
        path = self.settings_file
        if not path.exists():
            logger.info(f"No settings at {path}, writing defaults")
            return self._store(AppSettings())

        try:
            raw = path.read_text(encoding="utf-8")
            settings = AppSettings.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Settings at {path} are unusable ({e}), falling back to defaults")
            self._set_aside(path)
            return self._store(AppSettings())
        except OSError as e:
            raise ConfigurationError(f"Cannot read settings: {e}", config_path=str(path)) from e

        logger.debug(f"Settings loaded from {path}")
        return settings

    def _set_aside(self, path: Path) -> None:
        backup = path.with_suffix(BACKUP_SUFFIX)
        path.replace(backup)
        logger.info(f"Previous settings kept as {backup}")

    def _store(self, settings: AppSettings) -> AppSettings:
        """Write ``settings`` through a temporary file and return them."""
        target = self.settings_file
        staging = target.with_suffix(".tmp")
        document = json.dumps(settings.model_dump(), indent=2, ensure_ascii=False)

        try:
            staging.write_text(document, encoding="utf-8")
            staging.replace(target)
        except OSError as e:
            staging.unlink(missing_ok=True)
            raise ConfigurationError(f"Cannot write settings: {e}", config_path=str(target)) from e

        return settings

    # Dot-path access

    def get_setting(self, key_path: str, default: Any = None) -> Any:
        """
        Read one value, e.g. ``network.timeout`` or a whole ``providers`` section.

        Returns ``default`` when the path does not name a setting.
        """
        node: Any = self.settings.model_dump()
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def update_setting(self, key_path: str, value: Any) -> None:
        """
        Change one value and persist the result.

        The whole document is re-validated, so cross-field rules such as
        distinct cipher keys still hold after the change.

        Raises:
            ConfigurationError: Unknown path or a value the schema rejects
        """
        parts = _split_path(key_path)

        with self._lock:
            if self._settings is None:
                raise ConfigurationError("Settings not loaded")

            document: Dict[str, Any] = self._settings.model_dump()
            section: Any = document
            for part in parts[:-1]:
                section = section.get(part) if isinstance(section, dict) else None
                if not isinstance(section, dict):
                    raise ConfigurationError(f"Invalid setting path: {key_path}")

            if parts[-1] not in section:
                raise ConfigurationError(f"Invalid setting key: {parts[-1]}")
            section[parts[-1]] = value

            try:
                candidate = AppSettings.model_validate(document)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid value for {key_path}: {e}") from e

            self._settings = self._store(candidate)

        logger.info(f"Setting {key_path} changed to {value!r}")

    def reload_configuration(self) -> None:
        """Discard the in-memory settings and read the file again."""
        with self._lock:
            logger.info("Reloading settings from disk")
            self._settings = self._load()

    def reset_to_defaults(self) -> None:
        """Overwrite the settings file with the schema defaults."""
        with self._lock:
            logger.warning("Restoring default settings")
            self._settings = self._store(AppSettings())


__all__ = ["ConfigManager", "SETTINGS_FILE_NAME"]

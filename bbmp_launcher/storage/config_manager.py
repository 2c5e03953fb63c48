"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bbmp_launcher.exceptions import ConfigurationError
from bbmp_launcher.models.config import LauncherConfig

log = logging.getLogger(__name__)


def _to_ini_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    # configparser uses % for interpolation, so we must escape it
    return str(value).replace("%", "%%")


class ConfigManager:
    """Handles all operations related to the launcher's INI config file."""

    _BOOL_KEYS = {"devmode", "always_on_top"}
    _INT_KEYS = {"port", "rport", "runtime_version", "max_redirects"}
    _FLOAT_KEYS = {"request_timeout"}

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> LauncherConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.
        A missing file is created with default values first.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated LauncherConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        if not self.config_file_path.is_file():
            log.debug(f"Creating default configuration at {self.config_file_path}")
            self.save_settings({})

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        config_from_file = self._get_config_as_dict()

        # Override with CLI options
        if cli_options:
            config_from_file.update(
                {k: v for k, v in cli_options.items() if v is not None}
            )

        try:
            return LauncherConfig(
                **config_from_file, config_path=str(self.config_file_path.parent)
            )
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_settings(self, updates: dict[str, Any]) -> None:
        """
        Merges ``updates`` into the stored settings and rewrites the file.

        Raises:
            ConfigurationError: If a value is invalid or the file cannot be written.
        """
        current: dict[str, Any] = {}
        if self.config_file_path.is_file():
            parser = configparser.ConfigParser()
            try:
                parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e
            self._parser = parser
            current = self._get_config_as_dict()

        current.update({k: v for k, v in updates.items() if v is not None})
        try:
            merged = LauncherConfig(**current)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid setting:\n{e}") from e

        config = configparser.ConfigParser()
        config["DEFAULT"] = {
            key: _to_ini_value(getattr(merged, key))
            for key in sorted(LauncherConfig.get_ini_keys())
        }
        self._write(config)
        self._parser = config

    def _write(self, parser: configparser.ConfigParser) -> None:
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                parser.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        values: dict[str, Any] = {}
        try:
            for key in LauncherConfig.get_ini_keys():
                if key not in section:
                    continue
                if key in self._BOOL_KEYS:
                    values[key] = section.getboolean(key)
                elif key in self._INT_KEYS:
                    values[key] = section.getint(key)
                elif key in self._FLOAT_KEYS:
                    values[key] = section.getfloat(key)
                else:
                    values[key] = section.get(key)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e
        return values

    def as_display_dict(self) -> dict[str, Any]:
        """The stored settings, as read from disk, for display."""
        if not self.config_file_path.is_file():
            return {}
        self._parser.read(self.config_file_path, encoding="utf-8")
        return self._get_config_as_dict()

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = LauncherConfig()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(LauncherConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = _to_ini_value(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                self._write(self._parser)
            except ConfigurationError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving

"""
Configuration management utilities.

This module provides centralized configuration loading and typed lookups
over the process configuration file.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import InvalidSettingError
from .constants import DEFAULT_CONFIG_PATH
from .validation.settings import parse_bool, stringify

_MISSING = object()


class ConfigManager:
    """
    Manages configuration loading and access.

    This class provides a centralized way to load and access configuration
    from TOML files with proper error handling and validation. A manager
    whose file does not exist can be made tolerant with ``optional=True``,
    in which case every lookup returns its default.
    """

    def __init__(self, config_path: Optional[str] = None, *, optional: bool = False) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default path.
            optional: Treat a missing file as an empty configuration
        """
        self.config_path = Path(config_path).expanduser() if config_path else Path(DEFAULT_CONFIG_PATH).expanduser()
        self.optional = optional
        self._config: Optional[Dict[str, Any]] = None

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Dictionary containing configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist (and is not optional)
            ValueError: If config file is invalid
        """
        if self._config is not None:
            return self._config

        if not self.config_path.exists():
            if self.optional:
                logging.debug("No configuration file at %s, using defaults", self.config_path)
                self._config = {}
                return self._config
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "rb") as f:
                self._config = tomllib.load(f)
            logging.debug("Loaded configuration from %s", self.config_path)
            return self._config
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in configuration file {self.config_path}: {e}") from e
        except Exception as e:
            raise ValueError(f"Failed to load configuration from {self.config_path}: {e}") from e

    def _lookup(self, key: str) -> Any:
        """
        Resolve a dotted key (e.g. "path.repos") against the loaded file.

        Returns:
            The raw TOML value, or _MISSING when any component is absent
        """
        if self._config is None:
            self.load()

        value: Any = self._config
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return _MISSING
            value = value[k]
        return value

    def get_str(self, key: str, default: str = "") -> str:
        """Get a string value; scalars are converted to text."""
        value = self._lookup(key)
        if value is _MISSING:
            return default
        if isinstance(value, (dict, list)):
            raise InvalidSettingError(f"Expected a string for '{key}', got {type(value).__name__}")
        return stringify(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """
        Get a boolean value.

        Raises:
            InvalidSettingError: If the value is not a recognised boolean
        """
        value = self._lookup(key)
        if value is _MISSING:
            return default
        return parse_bool(value, key)

    def get_map_list(self, key: str) -> List[Dict[str, str]]:
        """
        Get a list of string maps (e.g. [[repos]] tables).

        Args:
            key: Configuration key

        Returns:
            List of maps with every scalar value converted to a string;
            an empty list when the key is absent

        Raises:
            InvalidSettingError: If the value is not a list of tables of scalars
        """
        value = self._lookup(key)
        if value is _MISSING:
            return []
        if not isinstance(value, list):
            raise InvalidSettingError(f"Expected a list for '{key}', got {type(value).__name__}")

        result = []
        for entry in value:
            if not isinstance(entry, dict):
                raise InvalidSettingError(f"Expected a table in '{key}', got {type(entry).__name__}")
            mapping = {}
            for name, item in entry.items():
                if isinstance(item, (dict, list)):
                    raise InvalidSettingError(f"Expected a scalar for '{key}.{name}', got {type(item).__name__}")
                mapping[name] = stringify(item)
            result.append(mapping)
        return result


__all__ = ["ConfigManager"]

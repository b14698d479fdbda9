"""
Configuration management for Shelver.

This module handles loading and accessing configuration values from
shelver.yaml. The archiver itself never reads this module: callers build an
ArchiverSettings value from it and pass that value in.
"""

import yaml
from pathlib import Path
from typing import Any, Dict
import logging

from .models import ArchiverSettings


DEFAULT_CONFIG_PATH = "shelver.yaml"


class ConfigManager:
    """
    Manages configuration loading and access for Shelver.
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "file": None
            },
            "vault": {
                "root": ".",
                "file_extension": ".md"
            },
            "archiver": ArchiverSettings().model_dump()
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "archiver.archive_heading")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("archiver.archive_heading")  # Returns "Archived"
            config.get("archiver.indentation.use_tab")  # Returns True
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section) or {}

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def log_level(self) -> str:
        """Get logging level name."""
        return self.get("logging.level", "INFO")

    @property
    def log_format(self) -> str:
        """Get logging format string."""
        return self.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    @property
    def log_filename(self):
        """Get log file name, or None to log to stdout only."""
        return self.get("logging.file")

    @property
    def vault_root(self) -> str:
        """Get the folder archive paths are relative to."""
        return self.get("vault.root", ".")

    @property
    def file_extension(self) -> str:
        """Get the extension appended to archive file templates."""
        return self.get("vault.file_extension", ".md")

    @property
    def archiver_settings(self) -> ArchiverSettings:
        """
        Validate the archiver section into settings.

        Raises:
            pydantic.ValidationError: If the section is malformed
        """
        return ArchiverSettings(**self.get_section("archiver"))

"""
Loads ladder bot settings from YAML and validates them.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .models import TradingConfig


logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration is rejected."""


class ConfigurationManager:
    """Reads YAML settings files into validated ``TradingConfig`` objects."""

    DEFAULT_CONFIG_FILENAME = "config.yaml"

    def load_config(self, config_path: Optional[str] = None) -> TradingConfig:
        """
        Read a settings file.

        A missing, unparsable or invalid file is logged and replaced by the
        default settings so that the CLI can always start.

        Args:
            config_path: YAML file to read (``config.yaml`` when None)

        Returns:
            Validated TradingConfig
        """
        if config_path is None:
            config_path = self.get_default_config_path()

        try:
            return self.read_config(config_path)
        except ConfigurationError as e:
            logger.warning(f"Ignoring settings in {config_path}: {e}")
            logger.info("Falling back to default trading settings")
            return TradingConfig()

    def read_config(self, config_path: str) -> TradingConfig:
        """
        Read a settings file strictly, without falling back to defaults.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML or
                holds invalid settings
        """
        try:
            raw = self._read_yaml(config_path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read {config_path}: {e}") from e
        return self.validate_config(raw)

    def validate_config(self, config: Union[Dict[str, Any], TradingConfig]) -> TradingConfig:
        """
        Validate settings strictly; used by the engine before applying them.

        Args:
            config: Mapping of settings, or an existing model to re-check

        Returns:
            A new validated TradingConfig

        Raises:
            ConfigurationError: If a value is out of range, of the wrong
                type, or unknown
        """
        if isinstance(config, TradingConfig):
            config = config.model_dump()
        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(config).__name__}")

        try:
            return TradingConfig(**config)
        except ValidationError as e:
            logger.warning(f"Rejected trading settings: {e.error_count()} invalid value(s)")
            raise ConfigurationError(str(e)) from e

    def get_default_config_path(self) -> str:
        return self.DEFAULT_CONFIG_FILENAME

    def _read_yaml(self, file_path: str) -> Dict[str, Any]:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"No settings file at {file_path}")

        with open(path, 'r', encoding='utf-8') as stream:
            return yaml.safe_load(stream) or {}

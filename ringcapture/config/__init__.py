"""YAML configuration loader for ringcapture."""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "ringcapture.yaml"

# Keys whose values are paths relative to the config file
_RELATIVE_PATH_KEYS = (
    "storage.data_directory",
    "logging.file_path",
)


class RingCaptureConfig:
    """ringcapture configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for
                ringcapture.yaml in the current directory.
        """
        self.config_file = Path(config_path or DEFAULT_CONFIG_NAME)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths against the config file location."""
        config_dir = self.config_file.parent
        for key_path in _RELATIVE_PATH_KEYS:
            section, key = key_path.split('.')
            value = config.get(section, {}).get(key) if isinstance(config.get(section), dict) else None
            if value and not os.path.isabs(value):
                config[section][key] = str(config_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'audio.sample_rate')."""
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_dict = self.config
        for key in keys[:-1]:
            config_dict = config_dict.setdefault(key, {})
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_capacity_frames(self) -> int:
        """Ring capacity in frames, from audio.buffer_seconds and audio.sample_rate."""
        sample_rate = int(self.get('audio.sample_rate', 44100))
        buffer_seconds = float(self.get('audio.buffer_seconds', 10))
        capacity = int(round(buffer_seconds * sample_rate))
        if capacity <= 0:
            raise ValueError(f"audio.buffer_seconds must be positive, got {buffer_seconds}")
        return capacity

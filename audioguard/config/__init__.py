"""Simple YAML configuration loader for AudioGuard."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from .constraints import (
    RecordingConstraints,
    DEFAULT_CONSTRAINTS,
    MAX_FILE_SIZE_BYTES,
    CLIPPING_THRESHOLD,
    SILENCE_THRESHOLD,
)
from .presets import AudioQuality, QualityPreset, LOW, MEDIUM, HIGH, get_preset

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "audioguard.yaml"

# YAML keys under ``recording`` that map onto RecordingConstraints fields.
_CONSTRAINT_KEYS = (
    "max_file_size_bytes",
    "clipping_threshold",
    "silence_threshold",
    "sample_rate",
    "channels",
    "buffer_duration_ms",
    "min_recording_duration_ms",
)


class AudioGuardConfig:
    """AudioGuard configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for audioguard.yaml
                        in the current directory.
        """
        self.config_file = Path(config_path) if config_path else Path.cwd() / DEFAULT_CONFIG_FILENAME

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

        # Invalid values - CRASH at load, not at first use
        self.get_recording_constraints()
        self.get_quality_preset()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'storage' in config and 'output_directory' in config['storage']:
            output_dir = config['storage']['output_directory']
            if not os.path.isabs(output_dir):
                config['storage']['output_directory'] = str(config_dir / output_dir)

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'recording.silence_threshold').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'processing.quality_preset')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_recording_constraints(self) -> RecordingConstraints:
        """Build validated recording constraints - CRASHES on invalid values."""
        overrides = {}
        for key in _CONSTRAINT_KEYS:
            value = self.get(f'recording.{key}')
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"recording.{key} must be a number, got {value!r}")
            overrides[key] = value

        if not overrides:
            return DEFAULT_CONSTRAINTS
        return RecordingConstraints(**overrides)

    def get_quality_preset(self) -> QualityPreset:
        """Get the configured quality preset (defaults to MEDIUM)."""
        return get_preset(self.get('processing.quality_preset', 'medium'))

    def get_output_directory(self) -> str:
        """Get directory for processed recordings."""
        output_dir = self.get('storage.output_directory', 'processed')
        return str(Path(output_dir).absolute())


__all__ = [
    "AudioGuardConfig",
    "RecordingConstraints",
    "DEFAULT_CONSTRAINTS",
    "MAX_FILE_SIZE_BYTES",
    "CLIPPING_THRESHOLD",
    "SILENCE_THRESHOLD",
    "AudioQuality",
    "QualityPreset",
    "LOW",
    "MEDIUM",
    "HIGH",
    "get_preset",
]

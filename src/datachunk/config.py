# ============================================================================
# FILE: config.py
# RELPATH: datachunk/src/datachunk/config.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Configuration manager with unknown key preservation
# ============================================================================

"""
Configuration Manager for Data Chunk Tool.

Handles loading, saving and validating the JSON configuration file. Keys
the tool does not know about are kept as they are.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, Union

from datachunk.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError
)


class ConfigManager:
    """
    Manages application configuration.

    Missing sections and keys fall back to DEFAULT_CONFIG on load, so older
    files keep working when new settings are added.
    """

    DEFAULT_CONFIG = {
        "engine": {
            "name": "data",
            "base64_line_width": 64
        },
        "sniffer": {
            "sample_bytes": 8192,
            "binary_threshold": 0.30
        },
        "app_defaults": {
            "md5sum": True,
            "echo": False,
            "overwrite_policy": "prompt",
            "dry_run_default": False,
            "log_dir": None
        },
        "loaders": {
            "csv": "read.csv",
            "rds": "readRDS"
        }
    }

    VALID_OVERWRITE_POLICIES = ["prompt", "skip", "overwrite", "rename"]

    def __init__(self, config_file: Union[str, Path] = "datachunk_config.json"):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file
        """
        self.config_file = Path(config_file)
        self.config: Dict = {}
        self._load_or_create()

    def _load_or_create(self) -> None:
        """Load existing config or create default."""
        if self.config_file.exists():
            self.load()
        else:
            self.config = self._deep_copy(self.DEFAULT_CONFIG)
            self.save()

    def load(self) -> Dict:
        """
        Load configuration from file, filling in missing defaults.

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigLoadError: If file cannot be loaded or parsed
        """
        try:
            text = self.config_file.read_text(encoding='utf-8')
            data = json.loads(text)
        except FileNotFoundError:
            raise ConfigLoadError(str(self.config_file), "File not found")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(str(self.config_file), f"Invalid JSON: {str(e)}")
        except OSError as e:
            raise ConfigLoadError(str(self.config_file), str(e))

        if not isinstance(data, dict):
            raise ConfigLoadError(str(self.config_file), "Top-level JSON value must be an object")

        self.config = self._merge_defaults(self._deep_copy(self.DEFAULT_CONFIG), data)
        return self.config

    def save(self) -> None:
        """
        Save configuration to file.

        Raises:
            ConfigError: If file cannot be written
        """
        try:
            text = json.dumps(self.config, indent=2, ensure_ascii=False)
            self.config_file.write_text(text, encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Failed to save config: {str(e)}")

    def _merge_defaults(self, defaults: Dict, data: Dict) -> Dict:
        """Overlay loaded data on defaults, keeping unknown keys."""
        for key, value in data.items():
            if isinstance(value, dict) and isinstance(defaults.get(key), dict):
                defaults[key] = self._merge_defaults(defaults[key], value)
            else:
                defaults[key] = value
        return defaults

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'engine.name')
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
        """
        Set configuration value using dot-notation path.

        Args:
            key_path: Dot-separated path
            value: Value to set
        """
        keys = key_path.split('.')
        target = self.config

        for key in keys[:-1]:
            if key not in target:
                target[key] = {}
            target = target[key]

        target[keys[-1]] = value

    def validate(self) -> bool:
        """
        Validate configuration against schema.

        Returns:
            True if valid

        Raises:
            ConfigValidationError: If validation fails
        """
        for section in ["engine", "app_defaults"]:
            if section not in self.config:
                raise ConfigValidationError(
                    section,
                    None,
                    f"Required section '{section}' missing"
                )

        self._validate_engine_name()
        self._validate_line_width()
        self._validate_threshold()
        self._validate_overwrite_policy()
        return True

    def _validate_engine_name(self) -> None:
        value = self.get('engine.name')
        if not isinstance(value, str) or not re.match(r'^[A-Za-z_][\w.-]*$', value):
            raise ConfigValidationError('engine.name', value, "Must be an identifier")

    def _validate_line_width(self) -> None:
        value = self.get('engine.base64_line_width')
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0 or value % 4:
            raise ConfigValidationError(
                'engine.base64_line_width',
                value,
                "Must be a positive multiple of 4"
            )

    def _validate_threshold(self) -> None:
        value = self.get('sniffer.binary_threshold')
        if not isinstance(value, (int, float)) or not 0 < value < 1:
            raise ConfigValidationError(
                'sniffer.binary_threshold',
                value,
                "Must be a number between 0 and 1"
            )

    def _validate_overwrite_policy(self) -> None:
        value = self.get('app_defaults.overwrite_policy')
        if value not in self.VALID_OVERWRITE_POLICIES:
            raise ConfigValidationError(
                'app_defaults.overwrite_policy',
                value,
                f"Must be one of: {', '.join(self.VALID_OVERWRITE_POLICIES)}"
            )

    def _deep_copy(self, obj: Any) -> Any:
        """Deep copy a configuration object."""
        if isinstance(obj, dict):
            return {k: self._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._deep_copy(item) for item in obj]
        else:
            return obj


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py
# TESTS: tests/unit/test_config.py
# ============================================================================

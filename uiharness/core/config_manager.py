"""
Configuration loading for UI Harness.

Reads a YAML (or JSON) configuration file, builds a Config from it and lets
HARNESS_* environment variables override individual values.
"""

import json
import logging
import threading
from dataclasses import asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml

from .config import Config
from .exceptions import ValidationError, FileOperationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ["harness.yaml", "harness.yml", "harness.json"]


class ConfigManager:
    """
    Loads and caches the harness configuration.

    The configuration is read once and then treated as read-only, so workers
    can share it without synchronization.
    """

    def __init__(self, config_file_path: Optional[Path] = None):
        self.config_file_path = config_file_path or self._find_default_file()
        self._config: Optional[Config] = None
        self._lock = threading.RLock()

    @staticmethod
    def _find_default_file() -> Optional[Path]:
        for name in DEFAULT_CONFIG_FILES:
            candidate = Path.cwd() / name
            if candidate.exists():
                return candidate
        return None

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary."""
        with self._lock:
            if self._config is None:
                self._config = self._load_config()
            return self._config

    def reload_config(self) -> Config:
        """Force reload configuration from file and environment."""
        with self._lock:
            self._config = self._load_config()
            return self._config

    def validate_config(self, config: Optional[Config] = None) -> List[str]:
        """
        Validate configuration and return list of validation errors.

        Args:
            config: Configuration to validate. If None, uses current config.

        Returns:
            List of validation error messages. Empty list if valid.
        """
        if config is None:
            config = self.get_config()

        try:
            config.validate()
        except ValidationError as e:
            return list(e.violations) or [e.message]
        return []

    def save_config(self, config: Config, path: Optional[Path] = None) -> Path:
        """Save configuration to a YAML file."""
        target = Path(path or self.config_file_path or Path.cwd() / "harness.yaml")
        config_dict = asdict(config)

        for key, value in config_dict.items():
            if isinstance(value, Path):
                config_dict[key] = str(value)

        try:
            with open(target, "w", encoding="utf-8") as f:
                yaml.safe_dump(config_dict, f, sort_keys=False)
        except OSError as e:
            raise FileOperationError(
                f"Failed to save configuration: {e}",
                file_path=str(target),
                operation="write",
            )
        return target

    def read_file(self, path: Path) -> Dict[str, Any]:
        """
        Read raw configuration values from a YAML or JSON file.

        Raises:
            FileOperationError: If the file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise FileOperationError(
                f"Could not load config file {path}: {e}",
                file_path=str(path),
                operation="read",
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FileOperationError(
                f"Config file {path} must contain a mapping",
                file_path=str(path),
                operation="read",
            )
        return data

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        if self.config_file_path is None:
            return Config.from_env()

        file_config = self.read_file(Path(self.config_file_path))
        known = {f.name for f in fields(Config)}

        values: Dict[str, Any] = {}
        for key, value in file_config.items():
            if key not in known:
                logger.warning(
                    f"Ignoring unknown configuration key '{key}' in {self.config_file_path}"
                )
                continue
            values[key] = value

        if "output_dir" in values:
            values["output_dir"] = Path(values["output_dir"])
        if "system_info" in values:
            values["system_info"] = {
                str(k): str(v) for k, v in (values["system_info"] or {}).items()
            }

        logger.info(f"Configuration loaded successfully from: {self.config_file_path}")
        return Config(**values)


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file_path: Optional[Path] = None) -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None or config_file_path is not None:
        _config_manager = ConfigManager(config_file_path)
    return _config_manager


def get_config() -> Config:
    """Get current configuration from global manager."""
    return get_config_manager().get_config()

"""Configuration management for relix."""

import os
import warnings
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from relix.models.config import RelixConfig
from relix.models.repository import SortMode


class ConfigManager:
    """Manages application configuration with YAML file and environment variable support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. If None, uses RELIX_CONFIG_PATH
                        environment variable or defaults to ~/.config/relix/config.yaml
        """
        if config_path is None:
            env_path = os.getenv("RELIX_CONFIG_PATH")
            if env_path:
                config_path = Path(env_path).expanduser()
            else:
                config_path = Path.home() / ".config" / "relix" / "config.yaml"

        self.config_path = config_path
        self._config: RelixConfig | None = None

    def load(self) -> RelixConfig:
        """Load configuration from file and apply environment variable overrides.

        Returns:
            Loaded configuration
        """
        config_data: dict[str, Any] = {}

        # 1. Load from YAML file if it exists
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # 2. Create config object (applies defaults)
        config = RelixConfig(**config_data)

        # 3. Apply environment variable overrides
        config = self._apply_env_overrides(config)

        return config

    def save(self, config: RelixConfig) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        # Paths and enums become plain strings in json mode
        config_dict = config.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _apply_env_overrides(self, config: RelixConfig) -> RelixConfig:
        """Apply environment variable overrides.

        Environment variables use the format: RELIX_<KEY>
        Examples:
            - RELIX_BACKUP_DIR=/srv/backups/apt
            - RELIX_SORT_MODE=status

        Invalid values are ignored and the file/default value is kept.

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        if backup_dir := os.getenv("RELIX_BACKUP_DIR"):
            config.paths.backup_dir = Path(backup_dir).expanduser()

        if sort_mode := os.getenv("RELIX_SORT_MODE"):
            if sort_mode in {m.value for m in SortMode}:
                config.view.sort_mode = SortMode(sort_mode)

        if timeout := os.getenv("RELIX_PROBE_TIMEOUT_MS"):
            if timeout.isdigit() and int(timeout) > 0:
                config.probe.timeout_ms = int(timeout)

        if host := os.getenv("RELIX_SERVER_HOST"):
            config.server.host = host
        if port := os.getenv("RELIX_SERVER_PORT"):
            if port.isdigit():
                config.server.port = int(port)

        if log_level := os.getenv("RELIX_LOG_LEVEL"):
            if log_level.upper() in ("INFO", "DEBUG", "TRACE"):
                config.advanced.log_level = log_level.upper()  # type: ignore

        return config

    def get_config(self) -> RelixConfig:
        """Get configuration (singleton pattern).

        Falls back to defaults when the file cannot be parsed, so a broken
        config never prevents the repository list from loading.

        Returns:
            Current configuration
        """
        if self._config is None:
            try:
                self._config = self.load()
            except (OSError, yaml.YAMLError, PydanticValidationError, TypeError) as e:
                # Logging is configured from this config, so it cannot report here
                warnings.warn(f"Ignoring unreadable config {self.config_path}: {e}", RuntimeWarning, stacklevel=2)
                self._config = self._apply_env_overrides(RelixConfig())
        return self._config

    def reload(self) -> RelixConfig:
        """Reload configuration from file.

        Returns:
            Reloaded configuration
        """
        self._config = None
        return self.get_config()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config() -> RelixConfig:
    """Get global application configuration.

    Returns:
        Application configuration
    """
    return _config_manager.get_config()


def reload_config() -> RelixConfig:
    """Reload configuration from file.

    Returns:
        Reloaded configuration
    """
    return _config_manager.reload()


def save_config(config: RelixConfig) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save
    """
    _config_manager.save(config)
    _config_manager._config = config

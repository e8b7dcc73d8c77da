"""Configuration loading and caching."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from stocklens.utils.logging import get_logger

from .schemas import Config

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

_config: Config | None = None


class ConfigLoader:
    """Load and validate configuration from YAML files."""

    def __init__(self, config_path: str | Path | None = None, project_root: Path | None = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to config file. If None, tries config/local.yaml
                        then config/default.yaml in the project root and falls
                        back to built-in defaults when neither exists.
            project_root: Directory holding ``config/`` and ``.env``
        """
        self.project_root = project_root or PROJECT_ROOT
        self.config_path = self._resolve_config_path(config_path)
        self._load_env()

    def _resolve_config_path(self, provided_path: str | Path | None) -> Path | None:
        """Resolve configuration file path.

        Args:
            provided_path: Explicitly provided config path

        Returns:
            Path to configuration file, or None to use defaults

        Raises:
            FileNotFoundError: If an explicitly provided path does not exist
        """
        if provided_path:
            path = Path(provided_path)
            if path.exists():
                return path
            raise FileNotFoundError(f"Config file not found: {path}")

        for candidate in ("local.yaml", "default.yaml"):
            path = self.project_root / "config" / candidate
            if path.exists():
                return path

        logger.debug("No config file found, using built-in defaults")
        return None

    def _load_env(self) -> None:
        """Load environment variables from .env file if present."""
        env_file = self.project_root / ".env"
        if env_file.exists():
            load_dotenv(env_file)

    def load(self) -> Config:
        """Load and validate configuration.

        Returns:
            Validated Config object

        Raises:
            yaml.YAMLError: If YAML parsing fails
            ValueError: If configuration validation fails
        """
        if self.config_path is None:
            return Config()

        with open(self.config_path, "r") as f:
            raw_config = yaml.safe_load(f) or {}

        raw_config = self._expand_env_vars(raw_config)
        logger.debug(f"Loaded configuration from {self.config_path}")
        return Config(**raw_config)

    def _expand_env_vars(self, value: Any, path: str = "") -> Any:
        """Recursively expand ${VAR_NAME} placeholders.

        Args:
            value: Config value (dict, list or scalar)
            path: Current config path for error messages

        Returns:
            Value with environment variables substituted

        Raises:
            ValueError: If a referenced variable is not set
        """
        if isinstance(value, dict):
            return {
                key: self._expand_env_vars(item, f"{path}.{key}" if path else str(key))
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self._expand_env_vars(item, f"{path}[{i}]") for i, item in enumerate(value)]
        if isinstance(value, str):

            def substitute(match: re.Match) -> str:
                env_var = match.group(1)
                env_value = os.getenv(env_var)
                if env_value is None:
                    raise ValueError(
                        f"Environment variable not found: {env_var} (required by config.{path})"
                    )
                return env_value

            return ENV_PATTERN.sub(substitute, value)
        return value

    def get_config_path(self) -> Path | None:
        """Get the resolved configuration file path.

        Returns:
            Path to configuration file, None when defaults are used
        """
        return self.config_path


def load_config(config_path: str | Path | None = None) -> Config:
    """Convenience function to load configuration.

    Args:
        config_path: Path to config file. If None, tries config/local.yaml
                    then config/default.yaml.

    Returns:
        Validated Config object
    """
    return ConfigLoader(config_path).load()


def get_config(config_path: str | Path | None = None) -> Config:
    """Get the process-wide configuration, loading it on first use.

    Args:
        config_path: Path to config file, only used on the first call

    Returns:
        Cached Config object
    """
    global _config
    if _config is None:
        _config = load_config(config_path)
    return _config


def reset_config() -> None:
    """Drop the cached configuration."""
    global _config
    _config = None

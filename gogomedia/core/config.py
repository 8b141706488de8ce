"""
Configuration management for gogomedia

This module loads application settings from a YAML file and the environment.
Values are grouped into dataclass sections:
- api: where the media service lives and how requests authenticate
- storage: where the session credentials are persisted
- logging: console and file logging behaviour

Precedence, lowest to highest: dataclass defaults, the YAML file, environment
variables. A `.env` file in the working directory is loaded before the
environment is read, so local overrides do not have to be exported.

Example config.yaml:
    api:
      base_url: "https://gogomedia-backend.herokuapp.com"
      timeout: 30
      auth_scheme: "JWT"

    storage:
      credentials_path: "~/.gogomedia/credentials.json"

    logging:
      level: "DEBUG"
      file: "gogomedia.log"
"""

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv

from gogomedia.core.exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


CONFIG_FILENAME = "config.yaml"
CONFIG_DIRECTORY = "~/.gogomedia"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ApiConfig:
    """
    Media service connection settings

    Attributes:
        base_url: Root URL of the media service; request paths are joined to it.
        timeout: Total seconds allowed for one request.
        auth_scheme: Prefix of the Authorization header value ("JWT <token>").
    """
    base_url: str = "http://localhost:5000"
    timeout: int = 30
    auth_scheme: str = "JWT"


@dataclass
class StorageConfig:
    """Where the session credentials survive process restarts."""
    credentials_path: str = "~/.gogomedia/credentials.json"


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    An empty `file` disables file logging. Relative file names are placed in
    the configuration directory.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads every section from defaults, then the first YAML file found, then
    environment variables. Sections are plain dataclasses so callers read
    values as attributes (`settings.api.base_url`).
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize settings from config file and environment variables

        Args:
            config_path: Explicit YAML file. When given it must exist.

        Raises:
            ConfigError: If the explicit file is missing or any file found
                contains invalid YAML.
        """
        self.config_path = Path(config_path).expanduser() if config_path else None
        self.config_dir = Path(CONFIG_DIRECTORY).expanduser()

        self.api = ApiConfig()
        self.storage = StorageConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_environment_variables()

    def _candidate_paths(self) -> list[Path]:
        if self.config_path is not None:
            return [self.config_path]
        return [self.config_dir / CONFIG_FILENAME, Path.cwd() / CONFIG_FILENAME]

    def _load_config(self) -> None:
        """Read the first existing YAML file and apply it."""
        if self.config_path is not None and not self.config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {self.config_path}",
                details={"file_path": str(self.config_path)}
            )

        for path in self._candidate_paths():
            if not path.exists():
                continue
            try:
                with open(path, "r", encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(
                    f"Invalid YAML syntax in configuration file: {e}",
                    details={"file_path": str(path)}
                ) from e
            except OSError as e:
                raise ConfigError(
                    f"Failed to read configuration file: {e}",
                    details={"file_path": str(path)}
                ) from e

            if not isinstance(config_data, dict):
                raise ConfigError(
                    "Configuration file must contain a YAML dictionary",
                    details={"file_path": str(path)}
                )
            self._apply_config(config_data)
            break

    def _apply_config(self, config_data: dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Unknown sections and unknown keys are ignored so older config files
        keep working.
        """
        config_mapping = {
            'api': self.api,
            'storage': self.storage,
            'logging': self.logging,
        }

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """Environment variables take precedence over file-based configuration."""
        env_mappings = {
            'GOGOMEDIA_API_URL': lambda v: setattr(self.api, 'base_url', v),
            'GOGOMEDIA_API_TIMEOUT': lambda v: setattr(self.api, 'timeout', int(v)),
            'GOGOMEDIA_AUTH_SCHEME': lambda v: setattr(self.api, 'auth_scheme', v),
            'GOGOMEDIA_CREDENTIALS_PATH': lambda v: setattr(self.storage, 'credentials_path', v),
            'GOGOMEDIA_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if not value:
                continue
            try:
                setter(value)
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for {env_var}: {value}",
                    details={"original_error": str(e)}
                ) from e

    def get_config_directory(self) -> Path:
        return self.config_dir

    def get_credentials_path(self) -> Path:
        """Expanded path of the credential file."""
        return Path(self.storage.credentials_path).expanduser()

    def validate(self) -> list[str]:
        """
        Validate current configuration

        Returns:
            A list of human readable problems; empty when the settings are usable.
        """
        errors = []

        parsed = urlparse(self.api.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"Invalid api.base_url: {self.api.base_url!r}")

        if not isinstance(self.api.timeout, (int, float)) or self.api.timeout <= 0:
            errors.append(f"api.timeout must be positive, got {self.api.timeout!r}")

        if str(self.logging.level).upper() not in VALID_LOG_LEVELS:
            errors.append(f"Invalid logging.level: {self.logging.level!r}")

        return errors

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {
            'api': asdict(self.api),
            'storage': asdict(self.storage),
            'logging': asdict(self.logging),
        }

    def __str__(self) -> str:
        return f"Settings(api={self.api.base_url}, credentials={self.storage.credentials_path})"


# Global settings instance, created on first use
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The process-wide Settings, loading it on first call
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: str | Path | None = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New global Settings instance
    """
    global _settings
    _settings = Settings(config_path)
    return _settings

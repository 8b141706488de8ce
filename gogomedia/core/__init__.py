"""
Core module for gogomedia.

Foundational components shared by every other module:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Console and file logging setup

Usage:
    from gogomedia.core import (
        Settings, get_settings,
        setup_logging, get_logger,
        GoGoMediaError, ConfigError, TransportError
    )
"""

from gogomedia.core.config import (
    ApiConfig,
    LoggingConfig,
    Settings,
    StorageConfig,
    get_settings,
    reload_settings,
)
from gogomedia.core.exceptions import (
    ConfigError,
    CredentialStoreError,
    GoGoMediaError,
    TransportError,
)
from gogomedia.core.logger import (
    configure_from_settings,
    get_logger,
    parse_size,
    setup_logging,
)

__all__ = [
    # Config
    "Settings",
    "ApiConfig",
    "StorageConfig",
    "LoggingConfig",
    "get_settings",
    "reload_settings",
    # Exceptions
    "GoGoMediaError",
    "ConfigError",
    "CredentialStoreError",
    "TransportError",
    # Logger
    "setup_logging",
    "configure_from_settings",
    "get_logger",
    "parse_size",
]

"""
Custom exceptions for gogomedia.

All library exceptions inherit from GoGoMediaError, which carries a human
readable message plus an optional dictionary of details for logging.

Hierarchy:
    GoGoMediaError
    ├── ConfigError           - configuration file missing or invalid
    ├── CredentialStoreError  - credential file unreadable or unwritable
    └── TransportError        - a request to the media service failed

TransportError never reaches application code through the session or cache
operations: those convert it into an error Outcome. It is raised only by
RequestTransport implementations.
"""

from typing import Any


class GoGoMediaError(Exception):
    """
    Base exception for every gogomedia failure.

    Attributes:
        message: Human readable description of the problem.
        details: Extra context (paths, status codes, original errors).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({extra})"


class ConfigError(GoGoMediaError):
    """Raised when the configuration cannot be loaded or is invalid."""


class CredentialStoreError(GoGoMediaError):
    """Raised when the persistent credential store cannot be read or written."""


class TransportError(GoGoMediaError):
    """
    A request to the media service did not succeed.

    Attributes:
        status: HTTP status code of the response, or 0 when no response
                was received (connection refused, timeout, bad payload).
    """

    def __init__(
        self,
        status: int,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status = status

    @property
    def is_unauthorized(self) -> bool:
        """True when the server rejected the presented credentials."""
        return self.status == 401

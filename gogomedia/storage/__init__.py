"""Credential persistence for the session layer."""

from gogomedia.storage.credentials import (
    TOKEN_KEY,
    USERNAME_KEY,
    CredentialStore,
    JsonFileCredentialStore,
    MemoryCredentialStore,
)

__all__ = [
    "CredentialStore",
    "JsonFileCredentialStore",
    "MemoryCredentialStore",
    "TOKEN_KEY",
    "USERNAME_KEY",
]

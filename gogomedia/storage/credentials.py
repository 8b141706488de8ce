"""
Persistent credential storage

The session layer keeps the logged in username and auth token in a small
string key-value store so a session survives process restarts. Any object
with `get`/`set`/`remove` satisfies the CredentialStore protocol; two
implementations ship with the package:

- JsonFileCredentialStore: a JSON object on disk, written with owner-only
  permissions (0600) where the platform supports it
- MemoryCredentialStore: a dict, for tests and throwaway sessions
"""

import json
from pathlib import Path
from typing import Protocol

from gogomedia.core.exceptions import CredentialStoreError
from gogomedia.core.logger import get_logger

# Keys used by the session layer
TOKEN_KEY = "jwt"
USERNAME_KEY = "user"


class CredentialStore(Protocol):
    """String key-value store that survives restarts."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete `key`; absent keys are ignored."""


class MemoryCredentialStore:
    """In-process credential store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileCredentialStore:
    """
    Credential store backed by a JSON file

    The whole file is rewritten on every change. Parent directories are
    created on first write and the file is restricted to its owner.

    Attributes:
        path: Location of the JSON file
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self.logger = get_logger(__name__)
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            # A corrupt file means no usable session; start over
            self.logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return {}
        except OSError as e:
            raise CredentialStoreError(
                f"Failed to read credential file: {e}",
                details={"path": str(self.path)}
            ) from e

        if not isinstance(data, dict):
            self.logger.warning(f"Ignoring credential file {self.path}: not a JSON object")
            return {}
        return {str(key): str(value) for key, value in data.items() if value is not None}

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            raise CredentialStoreError(
                f"Failed to write credential file: {e}",
                details={"path": str(self.path)}
            ) from e

        try:
            # 0o600 = owner read/write only
            self.path.chmod(0o600)
        except OSError:
            # Windows doesn't support chmod
            pass

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Store and persist `value`

        Raises:
            CredentialStoreError: If the file cannot be written; the previous
                value is kept in memory
        """
        previous = dict(self._data)
        self._data[key] = value
        try:
            self._save()
        except CredentialStoreError:
            self._data = previous
            raise

    def remove(self, key: str) -> None:
        """
        Forget `key` and persist the change

        Raises:
            CredentialStoreError: If the file cannot be written; the key stays
                removed in memory so this process no longer sees it
        """
        if key in self._data:
            del self._data[key]
            self._save()

"""
Session and cache state shared by the session manager, the media cache and
the error translator

A SessionContext is the single owner of:
- the current username and auth token (mirrored in the credential store)
- the cached media collection for that session

Lifecycle:
    create()    restore username/token from the store if a session is stored
    establish() persist a freshly issued session
    reset()     forget the session everywhere (logout, forced logout)
    destroy()   drop in-memory state when the client shuts down; the stored
                session is kept so the next process can resume it

Only the media cache assigns `media`; other components read it.
"""

from gogomedia.core.logger import get_logger
from gogomedia.models import MediaCollection
from gogomedia.core.exceptions import CredentialStoreError
from gogomedia.storage.credentials import TOKEN_KEY, USERNAME_KEY, CredentialStore


class SessionContext:
    """
    Explicit holder of session identity and cached media

    Attributes:
        store: Persistent credential store
        username: Logged in user, "" when logged out
        auth_token: Opaque token issued by login, "" when logged out
        media: Cached collection, None until the first successful fetch
    """

    def __init__(self, store: CredentialStore):
        self.store = store
        self.username = ""
        self.auth_token = ""
        self.media: MediaCollection | None = None
        self.destroyed = False
        self.logger = get_logger(__name__)

    @classmethod
    def create(cls, store: CredentialStore) -> 'SessionContext':
        """Build a context, resuming the stored session when there is one."""
        context = cls(store)
        if context.is_active:
            context.username = store.get(USERNAME_KEY) or ""
            context.auth_token = store.get(TOKEN_KEY) or ""
            context.logger.debug(f"Resumed stored session for user: {context.username}")
        return context

    @property
    def is_active(self) -> bool:
        """True iff both a token and a username are in the credential store."""
        return self.store.get(TOKEN_KEY) is not None and self.store.get(USERNAME_KEY) is not None

    def establish(self, username: str, auth_token: str) -> None:
        """Persist and adopt a new session; any previous cache is dropped."""
        self.store.set(TOKEN_KEY, auth_token)
        self.store.set(USERNAME_KEY, username)
        self.media = None
        self.username = username
        self.auth_token = auth_token

    def reset(self) -> None:
        """
        Forget the session in memory and in the store

        Both keys are removed even if the first removal fails.

        Raises:
            CredentialStoreError: The first store failure, after both removals
                were attempted
        """
        self.username = ""
        self.auth_token = ""
        self.media = None

        failure = None
        for key in (TOKEN_KEY, USERNAME_KEY):
            try:
                self.store.remove(key)
            except CredentialStoreError as e:
                failure = failure or e
        if failure is not None:
            raise failure

    def destroy(self) -> None:
        self.username = ""
        self.auth_token = ""
        self.media = None
        self.destroyed = True

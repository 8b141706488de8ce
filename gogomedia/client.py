"""
Client facade wiring the session layer, the media cache and the broadcaster

MediaClient is what an application holds. It builds one SessionContext over
the credential store and shares it between the SessionManager, the MediaCache
and the ErrorTranslator, so a 401 seen by any of them logs the user out for
all of them.

    async with MediaClient.from_settings() as client:
        subscription = client.subscribe()
        outcome = await client.login("alice", "pw")
        if outcome.ok:
            records = await subscription.get()  # filled by the login refresh

Every operation returns an Outcome; none raises transport failures.
"""

from typing import Sequence

from gogomedia.api.transport import AiohttpTransport, RequestTransport
from gogomedia.core.config import Settings, get_settings
from gogomedia.core.logger import get_logger
from gogomedia.models import MediaCollection, MediaRecord, Outcome
from gogomedia.session.context import SessionContext
from gogomedia.session.manager import SessionManager
from gogomedia.storage.credentials import CredentialStore, JsonFileCredentialStore
from gogomedia.sync.broadcaster import ChangeBroadcaster, Listener, Subscription
from gogomedia.sync.cache import MediaCache
from gogomedia.sync.errors import ErrorTranslator


class MediaClient:
    """
    Session and media operations of one user of the media service

    Attributes:
        context: Shared session and cache state
        session: Register/login/logout
        media: The cached media collection and its mutations
        broadcaster: Snapshot channel fed by `media`
    """

    def __init__(
        self,
        transport: RequestTransport,
        store: CredentialStore,
        auth_scheme: str = "JWT",
    ):
        self.transport = transport
        self.logger = get_logger(__name__)

        self.context = SessionContext.create(store)
        self.broadcaster = ChangeBroadcaster()
        self.translator = ErrorTranslator(self.context)
        self.media = MediaCache(
            self.context, transport, self.translator, self.broadcaster, auth_scheme=auth_scheme
        )
        self.session = SessionManager(
            self.context, transport, self.translator,
            refresh=self.media.fetch,
            auth_scheme=auth_scheme,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> 'MediaClient':
        """Build a client with the aiohttp transport and the JSON credential file."""
        settings = settings or get_settings()
        transport = AiohttpTransport(settings.api.base_url, timeout=settings.api.timeout)
        store = JsonFileCredentialStore(settings.get_credentials_path())
        return cls(transport, store, auth_scheme=settings.api.auth_scheme)

    # Session operations

    def logged_in(self) -> bool:
        return self.session.logged_in()

    @property
    def username(self) -> str:
        return self.context.username

    async def register(self, username: str, password: str) -> Outcome[str]:
        return await self.session.register(username, password)

    async def login(self, username: str, password: str) -> Outcome[str]:
        return await self.session.login(username, password)

    async def logout(self) -> Outcome[str]:
        return await self.session.logout()

    async def wait_for_refresh(self) -> Outcome[MediaCollection] | None:
        """Await the cache refresh started by the last login, if any."""
        task = self.session.refresh_task
        if task is None:
            return None
        return await task

    # Media operations

    @property
    def collection(self) -> MediaCollection | None:
        return self.media.collection

    async def fetch(self) -> Outcome[MediaCollection]:
        return await self.media.fetch()

    async def add(self, record: MediaRecord) -> Outcome[MediaRecord]:
        return await self.media.add(record)

    async def update(
        self,
        records: MediaRecord | Sequence[MediaRecord],
    ) -> Outcome[MediaRecord | MediaCollection]:
        return await self.media.update(records)

    async def delete(self, record: MediaRecord) -> Outcome[str]:
        return await self.media.delete(record)

    # Change notification

    def subscribe(self) -> Subscription:
        return self.broadcaster.subscribe()

    def add_listener(self, listener: Listener):
        return self.broadcaster.add_listener(listener)

    # Lifecycle

    async def close(self) -> None:
        """Stop background work, release the transport and drop in-memory state."""
        await self.session.close()
        close = getattr(self.transport, 'close', None)
        if close is not None:
            await close()
        self.context.destroy()
        self.logger.debug("Media client closed")

    async def __aenter__(self) -> 'MediaClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

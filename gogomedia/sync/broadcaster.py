"""
Change broadcaster for the media collection

The media cache pushes a snapshot of its collection here after every
successful fetch, add, update and delete. Observers either register a plain
callback with add_listener() or hold a Subscription and await snapshots:

    subscription = broadcaster.subscribe()
    async for snapshot in subscription:
        render(snapshot)

There is no replay: a subscriber sees only emissions made after it
subscribed. Each subscription holds at most one snapshot, the latest, so
a subscriber that stops reading costs one list and not one per change. Code that needs the current list on subscribe reads
MediaCache.collection directly.
"""

import asyncio
from typing import Callable

from gogomedia.core.logger import get_logger
from gogomedia.models import MediaCollection

Listener = Callable[[MediaCollection], None]


class Subscription:
    """
    Latest snapshot delivered to one subscriber

    An emission replaces a snapshot that was not consumed yet, so a slow
    consumer skips intermediate snapshots and always reads the newest one.
    """

    def __init__(self, broadcaster: 'ChangeBroadcaster'):
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue[MediaCollection] = asyncio.Queue(maxsize=1)
        self.closed = False

    def _deliver(self, snapshot: MediaCollection) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(list(snapshot))

    def pending(self) -> int:
        """1 if a snapshot is waiting to be consumed, else 0."""
        return self._queue.qsize()

    async def get(self) -> MediaCollection:
        """Wait for the next snapshot."""
        return await self._queue.get()

    def get_nowait(self) -> MediaCollection:
        """
        Next queued snapshot without waiting

        Raises:
            asyncio.QueueEmpty: If nothing is queued
        """
        return self._queue.get_nowait()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._broadcaster._unsubscribe(self)

    def __aiter__(self) -> 'Subscription':
        return self

    async def __anext__(self) -> MediaCollection:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        return await self.get()

    def __enter__(self) -> 'Subscription':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ChangeBroadcaster:
    """Multi-subscriber push channel of media collection snapshots."""

    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._listeners: list[Listener] = []
        self.logger = get_logger(__name__)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Register a synchronous callback

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions) + len(self._listeners)

    def emit(self, collection: MediaCollection) -> None:
        """
        Deliver one snapshot to every current subscriber

        Each subscriber gets its own copy of the list. A listener that raises
        is logged and skipped; the others still receive the snapshot.
        """
        self.logger.debug(f"Broadcasting {len(collection)} media to {self.subscriber_count} subscribers")
        for subscription in list(self._subscriptions):
            subscription._deliver(collection)

        for listener in list(self._listeners):
            try:
                listener(list(collection))
            except Exception as e:
                self.logger.warning(f"Media listener {listener!r} failed: {e}", exc_info=True)

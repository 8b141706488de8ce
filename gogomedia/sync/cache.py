"""
Local cache of the logged in user's media collection

MediaCache is the only component that changes the cached collection. The
collection is replaced wholesale by fetch() and updated incrementally by
add(), update() and delete(), always after the server confirmed the change:
a failed request leaves the cache exactly as it was.

Invariants:
- at most one record per id
- add() puts the server's record first (newest first)
- update() replaces records by id and never inserts
- every successful operation broadcasts exactly one snapshot

Results are applied in the order the operations were called, even when the
responses arrive in a different order (see sequencer.MutationSequencer). A
result that arrives after the session it was issued for has ended is
returned to its caller but not applied to the cache.
"""

from typing import Any, Callable, Sequence

from gogomedia.api import requests as api
from gogomedia.api.transport import ApiRequest, RequestTransport
from gogomedia.core.exceptions import TransportError
from gogomedia.core.logger import get_logger
from gogomedia.models import (
    SUCCESS,
    MediaCollection,
    MediaRecord,
    Outcome,
    parse_record,
    parse_record_list,
    parse_update_payload,
)
from gogomedia.session.context import SessionContext
from gogomedia.sync.broadcaster import ChangeBroadcaster
from gogomedia.sync.errors import ErrorTranslator
from gogomedia.sync.sequencer import MutationSequencer

# Applies a decoded response to the cache and builds the caller's outcome
Applier = Callable[[dict[str, Any], bool], Outcome[Any]]


class MediaCache:
    """
    Server-confirmed local copy of the user's media records

    Attributes:
        context: Shared session state; `context.media` holds the collection
        broadcaster: Receives a snapshot after every successful operation
    """

    def __init__(
        self,
        context: SessionContext,
        transport: RequestTransport,
        translator: ErrorTranslator,
        broadcaster: ChangeBroadcaster,
        auth_scheme: str = "JWT",
    ):
        self.context = context
        self.transport = transport
        self.translator = translator
        self.broadcaster = broadcaster
        self.auth_scheme = auth_scheme
        self.logger = get_logger(__name__)
        self._sequencer = MutationSequencer()

    @property
    def collection(self) -> MediaCollection | None:
        """Copy of the cached records, or None before the first fetch."""
        if self.context.media is None:
            return None
        return list(self.context.media)

    def _current(self) -> MediaCollection:
        return list(self.context.media or [])

    def _publish(self, collection: MediaCollection) -> None:
        self.context.media = collection
        self.broadcaster.emit(collection)

    def _drop_repeated_ids(self, records: MediaCollection) -> MediaCollection:
        """Keep the first record for each id; records without an id are kept."""
        seen = set()
        unique = []
        for record in records:
            if record.id is not None:
                if record.id in seen:
                    self.logger.debug(f"Dropping repeated media id {record.id} from fetch response")
                    continue
                seen.add(record.id)
            unique.append(record)
        return unique

    async def _round_trip(self, operation: str, request: ApiRequest, apply: Applier) -> Outcome[Any]:
        """
        Send `request` and apply its result in submission order

        `apply` receives the response envelope and whether the session the
        request was issued for is still the current one.
        """
        token = self.context.auth_token
        ticket = self._sequencer.issue()
        try:
            try:
                payload = await self.transport.send(request)
            except TransportError as e:
                return self.translator.translate(operation, e)

            await self._sequencer.wait_turn(ticket)

            same_session = self.context.is_active and self.context.auth_token == token
            try:
                return apply(payload, same_session)
            except (KeyError, ValueError) as e:
                return self.translator.translate(
                    operation,
                    TransportError(0, f"Malformed response: {e}")
                )
        finally:
            self._sequencer.release(ticket)

    async def fetch(self) -> Outcome[MediaCollection]:
        """Replace the cache with the server's list of records."""
        if not self.context.is_active:
            return Outcome.not_logged_in()

        def apply(payload: dict[str, Any], same_session: bool) -> Outcome[MediaCollection]:
            records = self._drop_repeated_ids(parse_record_list(payload.get('data', [])))
            self.logger.info("list of media was successfully gotten")
            if same_session:
                self._publish(records)
            return Outcome.success(list(records))

        request = api.fetch_media_request(self.context.username, self.context.auth_token, self.auth_scheme)
        return await self._round_trip("fetch", request, apply)

    async def add(self, record: MediaRecord) -> Outcome[MediaRecord]:
        """Create `record` on the server and put the returned record first."""
        if not self.context.is_active:
            return Outcome.not_logged_in()

        def apply(payload: dict[str, Any], same_session: bool) -> Outcome[MediaRecord]:
            created = parse_record(payload['data'])
            self.logger.info(f"media: {created.name} was successfully added")
            if same_session:
                current = [item for item in self._current() if not item.same_identity(created)]
                self._publish([created] + current)
            return Outcome.success(created)

        request = api.put_media_request(
            self.context.username, self.context.auth_token, record, self.auth_scheme
        )
        return await self._round_trip("add", request, apply)

    async def update(
        self,
        records: MediaRecord | Sequence[MediaRecord],
    ) -> Outcome[MediaRecord | MediaCollection]:
        """
        Update one or many records

        Each record in the response replaces the cached record with the same
        id. Response records whose id is not cached are dropped. The success
        value mirrors the response: one record or a list.
        """
        if not self.context.is_active:
            return Outcome.not_logged_in()

        def apply(payload: dict[str, Any], same_session: bool) -> Outcome[MediaRecord | MediaCollection]:
            result = parse_update_payload(payload['data'])
            if isinstance(records, MediaRecord):
                self.logger.info(f"media: {records.name} was successfully updated")
            else:
                self.logger.info("media list was successfully updated")

            if same_session:
                current = self._current()
                positions = {item.id: index for index, item in enumerate(current) if item.id is not None}
                for updated in result.records:
                    index = positions.get(updated.id) if updated.id is not None else None
                    if index is None:
                        self.logger.debug(f"Ignoring update for uncached media id: {updated.id}")
                        continue
                    current[index] = updated
                self._publish(current)
            return Outcome.success(result.value)

        request = api.put_media_request(
            self.context.username, self.context.auth_token, records, self.auth_scheme
        )
        return await self._round_trip("update", request, apply)

    async def delete(self, record: MediaRecord) -> Outcome[str]:
        """Delete `record` on the server and drop the cached record with its id."""
        if not self.context.is_active:
            return Outcome.not_logged_in()

        def apply(payload: dict[str, Any], same_session: bool) -> Outcome[str]:
            self.logger.info(f"media: {record.name} was deleted successfully")
            if same_session:
                self._publish([item for item in self._current() if not item.same_identity(record)])
            return Outcome.success(SUCCESS)

        request = api.delete_media_request(
            self.context.username, self.context.auth_token, record, self.auth_scheme
        )
        return await self._round_trip("delete", request, apply)

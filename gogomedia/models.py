"""
Data models for the media catalog client

This module defines the values that flow between the transport, the session
layer and the cache:

1. **MediaRecord**: one catalog entry. Only `id` and `name` are interpreted by
   this package; every other field the service returns is carried verbatim in
   `extra` and sent back unchanged.

2. **UpdatePayload**: the tagged variant an update response is decoded into.
   The service answers an update with either one record or a list of records;
   `Single` and `Many` both expose a `records` tuple so the cache merge has a
   single code path.

3. **Outcome**: the uniform result of every session and cache operation.
   Operations never raise transport failures to their callers; they return an
   Outcome whose `kind` says whether the value is a success payload, an error
   message, or a short-circuited "not logged in" answer.

Records are constructed from the service's JSON with the `from_api_data()`
factory methods and serialized back with `to_api_data()`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Sequence, TypeVar

T = TypeVar("T")

# Value returned by operations whose success carries no data
SUCCESS = "success"
NOT_LOGGED_IN = "not logged in"


@dataclass(frozen=True)
class MediaRecord:
    """
    One media entry owned by the logged in user

    Attributes:
        id: Server-assigned identifier; None for a record not yet created.
        name: Display name of the entry.
        extra: Every other field, untouched by this package.
    """
    name: str
    id: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_data(cls, data: dict[str, Any]) -> 'MediaRecord':
        """
        Factory method to construct a MediaRecord from a service JSON object

        Args:
            data: Raw record mapping as returned by the media service

        Returns:
            MediaRecord with unknown keys preserved in `extra`
        """
        extra = {key: value for key, value in data.items() if key not in ('id', 'name')}
        return cls(name=data.get('name', ''), id=data.get('id'), extra=extra)

    def to_api_data(self) -> dict[str, Any]:
        """Serialize back to the service's JSON shape."""
        data = dict(self.extra)
        if self.id is not None:
            data['id'] = self.id
        data['name'] = self.name
        return data

    def same_identity(self, other: 'MediaRecord') -> bool:
        return self.id is not None and self.id == other.id


MediaCollection = list[MediaRecord]


@dataclass(frozen=True)
class Single:
    """An update response carrying exactly one record."""
    record: MediaRecord

    @property
    def records(self) -> tuple[MediaRecord, ...]:
        return (self.record,)

    @property
    def value(self) -> MediaRecord:
        return self.record


@dataclass(frozen=True)
class Many:
    """An update response carrying a list of records."""
    items: tuple[MediaRecord, ...]

    @property
    def records(self) -> tuple[MediaRecord, ...]:
        return self.items

    @property
    def value(self) -> MediaCollection:
        return list(self.items)


UpdatePayload = Single | Many


def parse_record(data: Any) -> MediaRecord:
    """
    Decode one record mapping

    Raises:
        ValueError: If `data` is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError(f"Expected a media record, got {type(data).__name__}")
    return MediaRecord.from_api_data(data)


def parse_update_payload(data: Any) -> UpdatePayload:
    """
    Decode the `data` member of an update response into its tagged variant

    Args:
        data: Either a record mapping or a list of record mappings

    Raises:
        ValueError: If `data` is neither shape
    """
    if isinstance(data, list):
        return Many(tuple(parse_record(item) for item in data))
    return Single(parse_record(data))


def parse_record_list(data: Any) -> MediaCollection:
    """Decode a list of record mappings, as returned by a fetch."""
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of media records, got {type(data).__name__}")
    return [parse_record(item) for item in data]


def serialize_records(records: MediaRecord | Sequence[MediaRecord]) -> Any:
    """Request body for one record or a sequence of records."""
    if isinstance(records, MediaRecord):
        return records.to_api_data()
    return [record.to_api_data() for record in records]


class OutcomeKind(Enum):
    """
    What an Outcome carries

    Values:
        SUCCESS: The operation succeeded; `value` holds its result.
        ERROR: A request failed; `error` holds the message to show.
        NOT_LOGGED_IN: The operation needs a session and none exists; no
            request was sent. `value` holds the "not logged in" text; benign
            for logout, a refusal for cache calls.
    """
    SUCCESS = "success"
    ERROR = "error"
    NOT_LOGGED_IN = "not_logged_in"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Uniform success-or-error result of every session and cache operation

    Use the constructors rather than building instances directly:
        Outcome.success(record)
        Outcome.failure("media not found")
        Outcome.not_logged_in()
    """
    kind: OutcomeKind
    value: T | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: T) -> 'Outcome[T]':
        return cls(OutcomeKind.SUCCESS, value=value)

    @classmethod
    def failure(cls, message: str) -> 'Outcome[T]':
        return cls(OutcomeKind.ERROR, error=message)

    @classmethod
    def not_logged_in(cls) -> 'Outcome[T]':
        return cls(OutcomeKind.NOT_LOGGED_IN, value=NOT_LOGGED_IN)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def message(self) -> str:
        """Text to display: the error, or the value's string form on success."""
        if self.error is not None:
            return self.error
        return str(self.value)

    def __str__(self) -> str:
        return self.message

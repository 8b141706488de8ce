"""
GoGoMedia client: session and media-list synchronization for the GoGoMedia service

The package keeps a user's media catalog in sync with the server:

**Session management (`gogomedia/session/`)**
- register, login, logout against the service
- credentials persisted through a pluggable credential store, so a session
  survives restarts
- automatic logout when the server rejects the stored token (HTTP 401)

**Media cache (`gogomedia/sync/`)**
- local copy of the user's media records, changed only after the server
  confirms a fetch, add, update or delete
- results applied in call order even when responses arrive out of order
- a broadcaster pushing a fresh snapshot to every subscriber after each change

**Transport (`gogomedia/api/`)**
- request shapes of the GoGoMedia HTTP API
- an aiohttp transport; anything with an async `send()` can replace it

Every session and media operation returns an `Outcome`: a success value or an
error message. Transport failures never escape as exceptions.

Usage Example:

    from gogomedia import MediaClient, MediaRecord

    async with MediaClient.from_settings() as client:
        await client.login("alice", "secret")
        await client.wait_for_refresh()
        outcome = await client.add(MediaRecord(name="Song B"))
        print(outcome.message)
"""

from gogomedia.client import MediaClient
from gogomedia.models import (
    NOT_LOGGED_IN,
    SUCCESS,
    Many,
    MediaCollection,
    MediaRecord,
    Outcome,
    OutcomeKind,
    Single,
)

__version__ = "0.1.0"

__all__ = [
    "MediaClient",
    "MediaRecord",
    "MediaCollection",
    "Outcome",
    "OutcomeKind",
    "Single",
    "Many",
    "SUCCESS",
    "NOT_LOGGED_IN",
    "__version__",
]

"""Media cache synchronization and change notification."""

from gogomedia.sync.broadcaster import ChangeBroadcaster, Subscription
from gogomedia.sync.cache import MediaCache
from gogomedia.sync.errors import ErrorTranslator
from gogomedia.sync.sequencer import MutationSequencer

__all__ = [
    "ChangeBroadcaster",
    "Subscription",
    "MediaCache",
    "ErrorTranslator",
    "MutationSequencer",
]

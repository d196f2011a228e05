"""Short-lived snapshot cache for the loaded queue."""

import time
from typing import Callable, Optional

from ..domain.models import QueueCollection

DEFAULT_CACHE_TTL_MS = 1000


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class QueueCache:
    """
    Holds the last loaded collection for ``ttl_ms`` milliseconds.

    The TTL only decides whether a read may skip storage. Writes always go
    through and call ``invalidate()`` straight after.
    """

    def __init__(
        self,
        ttl_ms: float = DEFAULT_CACHE_TTL_MS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.ttl_ms = ttl_ms
        self.snapshot: Optional[QueueCollection] = None
        self.timestamp: float = 0
        self._clock = clock or monotonic_ms

    def is_fresh(self) -> bool:
        if self.snapshot is None:
            return False
        return self._clock() - self.timestamp < self.ttl_ms

    def read(self, allow_cache: bool) -> Optional[QueueCollection]:
        """Return the snapshot if the caller allows it and it is fresh."""
        if allow_cache and self.is_fresh():
            return self.snapshot
        return None

    def store(self, collection: QueueCollection) -> None:
        self.snapshot = collection
        self.timestamp = self._clock()

    def invalidate(self) -> None:
        self.snapshot = None
        self.timestamp = 0

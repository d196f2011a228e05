"""
Queue manager.

Single source of truth for the persisted reading queue. Mediates every read
and write, runs record migration on load, and owns the short-lived read
cache.

Cache policy: reads that decide what to show next must be fresh
(``allow_cache=False``); reads that only display counts may use the cache.
Every mutation works on its own fresh load (never cached), saves, then
invalidates the cache.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from ..core.config import Settings, get_settings
from ..domain.errors import QueueFormatError
from ..domain.intervals import format_interval
from ..domain.migration import parse_queue_document, serialize_queue
from ..domain.models import (
    DEFAULT_PRIORITY,
    CardStats,
    MemoryState,
    Priority,
    QueueCollection,
    QueueEntry,
    QueueStats,
    Rating,
    utc_now,
)
from ..domain.ports import MemoryModel, QueueStorage
from ..domain.selector import select_next, take_next
from ..utils.logging import QueueOperationLogContext, log_queue_load_failure
from .queue_cache import DEFAULT_CACHE_TTL_MS, QueueCache

logger = logging.getLogger(__name__)


def _round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


class QueueManager:
    """Loads, caches, schedules and persists the reading queue."""

    def __init__(
        self,
        storage: QueueStorage,
        memory_model: MemoryModel,
        cache_ttl_ms: float = DEFAULT_CACHE_TTL_MS,
        clock: Optional[Callable[[], float]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.memory_model = memory_model
        self.cache = QueueCache(ttl_ms=cache_ttl_ms, clock=clock)
        self._now = now or utc_now

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    async def load_queue(self, allow_cache: bool = False) -> QueueCollection:
        """Return the queue, from cache when allowed and fresh.

        A missing document is an empty queue. An unreadable or malformed one
        is logged and also treated as empty; this never raises.
        """
        cached = self.cache.read(allow_cache)
        if cached is not None:
            return cached

        queue = await self._read_fresh()
        self.cache.store(queue)
        return queue

    async def _read_fresh(self) -> QueueCollection:
        try:
            content = await self.storage.read()
        except (OSError, UnicodeDecodeError) as e:
            log_queue_load_failure(e, {"location": self.storage.location, "stage": "read"})
            return QueueCollection()

        if content is None:
            return QueueCollection()

        try:
            return parse_queue_document(content, self.memory_model.initialize_new_state)
        except QueueFormatError as e:
            log_queue_load_failure(
                e,
                {
                    "location": self.storage.location,
                    "stage": "parse",
                    "record_index": e.record_index,
                },
            )
            return QueueCollection()

    async def _load_for_update(self) -> QueueCollection:
        """Fresh private copy for a mutation. Never placed in the cache, so
        readers cannot see edits before they are saved."""
        return await self._read_fresh()

    async def save_queue(self, queue: QueueCollection) -> None:
        """Overwrite the stored queue.

        The cache is invalidated whether or not the write succeeds, so the
        next read always goes back to storage.

        Raises:
            QueueWriteError: If storage could not persist the document.
        """
        content = serialize_queue(queue)
        try:
            await self.storage.write(content)
        finally:
            self.invalidate_cache()

    def invalidate_cache(self) -> None:
        self.cache.invalidate()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_due_notes(self, allow_cache: bool = False) -> List[QueueEntry]:
        """Entries due now or earlier.

        Pass ``allow_cache=True`` only for display; picking the next note
        needs fresh data.
        """
        queue = await self.load_queue(allow_cache)
        now = self._now()
        return [entry for entry in queue.notes if entry.memory_state.due <= now]

    async def get_queue_stats(self, allow_cache: bool = False) -> QueueStats:
        queue = await self.load_queue(allow_cache)
        due = await self.get_due_notes(allow_cache)
        return QueueStats(due=len(due), total=len(queue))

    async def get_due_today_count(self, allow_cache: bool = True) -> int:
        """Entries due before the end of the local day. Display only."""
        queue = await self.load_queue(allow_cache)
        local_now = self._now().astimezone()
        end_of_day = local_now.replace(hour=23, minute=59, second=59, microsecond=999999)
        return sum(1 for entry in queue.notes if entry.memory_state.due <= end_of_day)

    async def is_note_in_queue(self, path: str, allow_cache: bool = True) -> bool:
        queue = await self.load_queue(allow_cache)
        return path in queue

    async def get_entry(self, path: str, allow_cache: bool = True) -> Optional[QueueEntry]:
        queue = await self.load_queue(allow_cache)
        return queue.find(path)

    async def get_next_note(self) -> Optional[str]:
        """Path of the note to read next, chosen from fresh data."""
        due = await self.get_due_notes(allow_cache=False)
        return select_next(due)

    async def get_review_batch(self, limit: Optional[int] = None) -> List[QueueEntry]:
        """Due entries in reading order, from fresh data."""
        due = await self.get_due_notes(allow_cache=False)
        return take_next(due, limit)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_to_queue(self, path: str, days_until_due: int = 0) -> bool:
        """Add a note, due ``days_until_due`` days from now.

        Returns False, writing nothing, if the note is already queued.
        """
        queue = await self._load_for_update()

        if path in queue:
            logger.debug(f"Note already in queue, not adding: {path}")
            return False

        with QueueOperationLogContext("add_to_queue", path=path, days_until_due=days_until_due):
            due = self._now() + timedelta(days=days_until_due)
            queue.notes.append(
                QueueEntry(
                    path=path,
                    memory_state=self.memory_model.initialize_new_state(due),
                    priority=DEFAULT_PRIORITY,
                )
            )
            await self.save_queue(queue)

        return True

    async def schedule_next(self, path: str, rating: Rating) -> Optional[datetime]:
        """Apply ``rating`` to a note and return its new due time.

        Returns None if the note is not in the queue (e.g. removed between
        selection and rating); nothing is written in that case.
        """
        queue = await self._load_for_update()
        entry = queue.find(path)

        if entry is None:
            logger.warning(f"Cannot schedule note not in queue: {path}")
            return None

        with QueueOperationLogContext("schedule_next", path=path, rating=Rating(rating).name):
            outcomes = self.memory_model.compute_next_states(entry.memory_state, self._now())
            outcome = outcomes[Rating(rating)]

            entry.review_logs.append(outcome.log)
            entry.memory_state = outcome.state

            await self.save_queue(queue)

        return entry.memory_state.due

    async def forget_card(self, path: str) -> bool:
        """Reset a note to a new card due now. Review history is kept."""
        queue = await self._load_for_update()
        entry = queue.find(path)

        if entry is None:
            return False

        with QueueOperationLogContext("forget_card", path=path):
            entry.memory_state = self.memory_model.initialize_new_state(self._now())
            await self.save_queue(queue)

        return True

    async def update_priority(self, path: str, priority: Priority) -> bool:
        queue = await self._load_for_update()
        entry = queue.find(path)

        if entry is None:
            return False

        with QueueOperationLogContext(
            "update_priority", path=path, priority=Priority(priority).name
        ):
            entry.priority = Priority(priority)
            await self.save_queue(queue)

        return True

    # ------------------------------------------------------------------
    # Pure projections
    # ------------------------------------------------------------------

    def get_card_stats(self, state: MemoryState) -> CardStats:
        return CardStats(
            stability=_round_one_decimal(state.stability),
            difficulty=_round_one_decimal(state.difficulty),
            reps=state.reps,
            lapses=state.lapses,
            state=state.state,
        )

    def preview_intervals(self, state: MemoryState) -> Dict[Rating, str]:
        """How long until the next review for each possible rating.

        Nothing is persisted.
        """
        now = self._now()
        outcomes = self.memory_model.compute_next_states(state, now)
        return {rating: format_interval(outcomes[rating].due, now) for rating in Rating}


def create_queue_manager(settings: Optional[Settings] = None) -> QueueManager:
    """Build a QueueManager wired to the vault file and the FSRS model."""
    from ..infrastructure.fsrs_memory_model import FsrsMemoryModel
    from ..infrastructure.vault_storage import VaultQueueStorage

    settings = settings or get_settings()

    storage = VaultQueueStorage(settings.vault_path, settings.queue_file)
    memory_model = FsrsMemoryModel(
        desired_retention=settings.desired_retention,
        maximum_interval=settings.maximum_interval,
        enable_fuzz=settings.enable_fuzz,
        enable_short_term=settings.enable_short_term,
    )
    return QueueManager(storage, memory_model, cache_ttl_ms=settings.cache_ttl_ms)

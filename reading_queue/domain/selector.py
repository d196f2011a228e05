"""Pure next-note selection. No storage, no clock."""

from datetime import datetime
from typing import List, Optional, Tuple

from ..utils.priority_queue import PriorityQueue
from .models import DEFAULT_PRIORITY, Priority, QueueEntry

# Wider than any POSIX timestamp we will see, so priority always dominates.
_PRIORITY_BAND = 1e11


def selection_key(entry: QueueEntry) -> Tuple[Priority, datetime]:
    """Sort key: priority first (High before Low), then earliest due."""
    priority = entry.priority if entry.priority is not None else DEFAULT_PRIORITY
    return priority, entry.memory_state.due


def selection_priority(entry: QueueEntry) -> float:
    """``selection_key`` folded into one number, for the heap."""
    priority, due = selection_key(entry)
    return int(priority) * _PRIORITY_BAND + due.timestamp()


def select_next(entries: List[QueueEntry]) -> Optional[str]:
    """Pick the path of the note to show next.

    ``entries`` should already be filtered to due notes; anything passed in is
    a candidate. Returns None for an empty list.
    """
    if not entries:
        return None

    return sorted(entries, key=selection_key)[0].path


def take_next(entries: List[QueueEntry], limit: Optional[int] = None) -> List[QueueEntry]:
    """Return up to ``limit`` entries in reading order (all when None)."""
    heap = PriorityQueue((entry, selection_priority(entry)) for entry in entries)

    batch: List[QueueEntry] = []
    while not heap.is_empty() and (limit is None or len(batch) < limit):
        batch.append(heap.pop())
    return batch

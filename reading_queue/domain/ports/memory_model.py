"""MemoryModel port -- abstracts the spaced-repetition scheduler."""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ..models import MemoryState, SchedulingTable


@runtime_checkable
class MemoryModel(Protocol):
    """Computes next memory states for a card.

    Implementations must be deterministic: the same state and ``now`` always
    yield the same table, so previews can be shown without persisting.
    """

    def initialize_new_state(self, due: datetime) -> MemoryState:
        """Return a fresh "new" card due at ``due``."""
        ...

    def compute_next_states(self, state: MemoryState, now: datetime) -> SchedulingTable:
        """Return the outcome of every rating applied to ``state`` at ``now``."""
        ...

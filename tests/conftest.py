import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from reading_queue.domain.models import (
    CardState,
    MemoryState,
    Priority,
    QueueEntry,
    Rating,
    ReviewLogRecord,
    SchedulingOutcome,
    SchedulingTable,
)
from reading_queue.infrastructure.vault_storage import InMemoryQueueStorage
from reading_queue.services.queue_manager import QueueManager

# Set test environment variables
os.environ["READING_QUEUE_LOG_LEVEL"] = "WARNING"
os.environ["READING_QUEUE_LOG_TO_FILE"] = "false"


@pytest.fixture(autouse=True)
def _strip_file_handlers():
    """Remove file handlers from root logger so tests never write to logs/."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    for h in saved:
        root.removeHandler(h)
    yield
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            root.removeHandler(h)
    for h in saved:
        root.addHandler(h)


# Fixed intervals per rating so scheduling tests can assert exact due times
FAKE_INTERVALS = {
    Rating.AGAIN: timedelta(minutes=10),
    Rating.HARD: timedelta(hours=2),
    Rating.GOOD: timedelta(days=1),
    Rating.EASY: timedelta(days=3),
}

FAKE_NEXT_STATE = {
    Rating.AGAIN: CardState.LEARNING,
    Rating.HARD: CardState.LEARNING,
    Rating.GOOD: CardState.REVIEW,
    Rating.EASY: CardState.REVIEW,
}


class FakeMemoryModel:
    """Deterministic MemoryModel with fixed intervals. Counts its calls."""

    def __init__(self):
        self.compute_calls = 0

    def initialize_new_state(self, due: datetime) -> MemoryState:
        return MemoryState(due=due, state=CardState.NEW)

    def compute_next_states(self, state: MemoryState, now: datetime) -> SchedulingTable:
        self.compute_calls += 1
        table = {}
        for rating in Rating:
            due = now + FAKE_INTERVALS[rating]
            lapsed = state.state == CardState.REVIEW and rating == Rating.AGAIN
            next_state = MemoryState(
                due=due,
                stability=FAKE_INTERVALS[rating].total_seconds() / 86400,
                difficulty=float(11 - 2 * int(rating)),
                reps=state.reps + 1,
                lapses=state.lapses + (1 if lapsed else 0),
                state=FAKE_NEXT_STATE[rating],
                last_review=now,
            )
            log = ReviewLogRecord(
                rating=rating,
                state=state.state,
                due=state.due,
                stability=state.stability,
                difficulty=state.difficulty,
                elapsed_days=0,
                scheduled_days=state.scheduled_days,
                review=now,
            )
            table[rating] = SchedulingOutcome(state=next_state, due=due, log=log)
        return table


class FakeClock:
    """Millisecond clock for cache TTL tests."""

    def __init__(self, start: float = 10_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def make_entry(
    path: str,
    due: datetime,
    priority: Optional[Priority] = Priority.NORMAL,
    state: CardState = CardState.NEW,
) -> QueueEntry:
    """Build a QueueEntry with a new card due at ``due``."""
    return QueueEntry(
        path=path,
        memory_state=MemoryState(due=due, state=state),
        priority=priority,
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fake_model() -> FakeMemoryModel:
    return FakeMemoryModel()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryQueueStorage:
    return InMemoryQueueStorage()


@pytest.fixture
def manager(storage, fake_model, fake_clock, now) -> QueueManager:
    """QueueManager over in-memory storage with a frozen wall clock."""
    return QueueManager(storage, fake_model, clock=fake_clock, now=lambda: now)

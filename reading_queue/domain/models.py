"""
Queue data model.

Pydantic models for the persisted reading queue. Field aliases keep the
on-disk JSON keys (``fsrsCard``, ``reviewLogs``, ``dueDate`` ...) stable while
the Python attributes use snake_case.
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import UnknownPriorityError, UnknownRatingError


class Priority(IntEnum):
    """Manual override applied on top of due-date ordering. Lower sorts first."""

    HIGH = 1
    NORMAL = 2
    LOW = 3


DEFAULT_PRIORITY = Priority.NORMAL


class Rating(IntEnum):
    """Reviewer feedback on how hard a note was to recall."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class CardState(IntEnum):
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


def to_utc(value: datetime) -> datetime:
    """Normalise a datetime to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryState(BaseModel):
    """Per-note card record produced and consumed by the memory model."""

    model_config = ConfigDict(validate_assignment=True)

    due: datetime
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: CardState = CardState.NEW
    step: Optional[int] = None
    last_review: Optional[datetime] = None

    @field_validator("due", "last_review")
    @classmethod
    def normalise_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        return to_utc(v)

    @field_validator("reps", "lapses")
    @classmethod
    def counts_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("review counters must be >= 0")
        return v


class ReviewLogRecord(BaseModel):
    """One rating event. Appended to a note's history, never edited."""

    model_config = ConfigDict(frozen=True)

    rating: Rating
    state: CardState
    due: datetime
    stability: float
    difficulty: float
    elapsed_days: int
    scheduled_days: int
    review: datetime

    @field_validator("due", "review")
    @classmethod
    def normalise_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class QueueEntry(BaseModel):
    """A reviewable note in the queue, keyed by ``path``."""

    model_config = ConfigDict(populate_by_name=True)

    path: str
    memory_state: MemoryState = Field(alias="fsrsCard")
    review_logs: List[ReviewLogRecord] = Field(default_factory=list, alias="reviewLogs")
    priority: Priority = DEFAULT_PRIORITY

    @field_validator("priority", mode="before")
    @classmethod
    def default_missing_priority(cls, v):
        return DEFAULT_PRIORITY if v is None else v

    @property
    def due(self) -> datetime:
        return self.memory_state.due


class LegacyQueueEntry(BaseModel):
    """Pre-memory-model record shape. Only read, never written."""

    model_config = ConfigDict(populate_by_name=True)

    path: str
    due_date: datetime = Field(alias="dueDate")
    interval_days: int = Field(alias="intervalDays")

    @field_validator("due_date")
    @classmethod
    def normalise_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class QueueCollection(BaseModel):
    """The persisted aggregate: insertion-ordered entries, unique by path."""

    notes: List[QueueEntry] = Field(default_factory=list)

    def find(self, path: str) -> Optional[QueueEntry]:
        for entry in self.notes:
            if entry.path == path:
                return entry
        return None

    def __contains__(self, path: str) -> bool:
        return self.find(path) is not None

    def __len__(self) -> int:
        return len(self.notes)

    def paths(self) -> List[str]:
        return [entry.path for entry in self.notes]


class SchedulingOutcome(BaseModel):
    """Result of rating a card with one particular rating."""

    model_config = ConfigDict(frozen=True)

    state: MemoryState
    due: datetime
    log: ReviewLogRecord


SchedulingTable = Dict[Rating, SchedulingOutcome]


class CardStats(BaseModel):
    """Display-only projection of a memory state."""

    model_config = ConfigDict(frozen=True)

    stability: float
    difficulty: float
    reps: int
    lapses: int
    state: CardState


class QueueStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    due: int
    total: int


def parse_rating(value: str) -> Rating:
    """Parse a rating from its name ("good") or number ("3").

    Raises:
        UnknownRatingError: For anything else.
    """
    text = str(value).strip()
    if text.isdigit():
        try:
            return Rating(int(text))
        except ValueError:
            raise UnknownRatingError(text) from None
    try:
        return Rating[text.upper()]
    except KeyError:
        raise UnknownRatingError(text) from None


def parse_priority(value: str) -> Priority:
    """Parse a priority from its name ("high") or number ("1").

    Raises:
        UnknownPriorityError: For anything else.
    """
    text = str(value).strip()
    if text.isdigit():
        try:
            return Priority(int(text))
        except ValueError:
            raise UnknownPriorityError(text) from None
    try:
        return Priority[text.upper()]
    except KeyError:
        raise UnknownPriorityError(text) from None

"""Tests for queue models and rating/priority parsing."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from reading_queue.domain.errors import UnknownPriorityError, UnknownRatingError
from reading_queue.domain.models import (
    DEFAULT_PRIORITY,
    CardState,
    MemoryState,
    Priority,
    QueueCollection,
    QueueEntry,
    Rating,
    parse_priority,
    parse_rating,
    to_utc,
)


class TestPriorityOrder:
    def test_numeric_order(self):
        assert Priority.HIGH < Priority.NORMAL < Priority.LOW

    def test_default_is_normal(self):
        assert DEFAULT_PRIORITY == Priority.NORMAL


class TestUtcNormalisation:
    def test_naive_is_taken_as_utc(self):
        assert to_utc(datetime(2024, 1, 1, 12)).tzinfo == timezone.utc

    def test_other_zone_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        value = to_utc(datetime(2024, 1, 1, 12, tzinfo=plus_two))
        assert value == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
        assert value.tzinfo == timezone.utc

    def test_memory_state_due_is_always_aware(self):
        state = MemoryState(due=datetime(2024, 1, 1))
        assert state.due.tzinfo == timezone.utc

    def test_memory_state_rejects_negative_counters(self):
        with pytest.raises(ValidationError):
            MemoryState(due=datetime(2024, 1, 1), reps=-1)


class TestQueueEntry:
    def test_defaults(self, now):
        entry = QueueEntry(path="a.md", memory_state=MemoryState(due=now))
        assert entry.priority == Priority.NORMAL
        assert entry.review_logs == []
        assert entry.memory_state.state == CardState.NEW
        assert entry.due == now

    def test_accepts_alias_and_field_name(self, now):
        by_alias = QueueEntry.model_validate(
            {"path": "a.md", "fsrsCard": {"due": now.isoformat()}}
        )
        by_name = QueueEntry(path="a.md", memory_state=MemoryState(due=now))
        assert by_alias == by_name


class TestQueueCollection:
    def test_find_and_contains(self, now):
        queue = QueueCollection(
            notes=[
                QueueEntry(path="a.md", memory_state=MemoryState(due=now)),
                QueueEntry(path="b.md", memory_state=MemoryState(due=now)),
            ]
        )
        assert queue.find("b.md").path == "b.md"
        assert queue.find("c.md") is None
        assert "a.md" in queue
        assert "c.md" not in queue
        assert len(queue) == 2
        assert queue.paths() == ["a.md", "b.md"]

    def test_empty(self):
        queue = QueueCollection()
        assert len(queue) == 0
        assert queue.find("a.md") is None


class TestParseRating:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("again", Rating.AGAIN),
            ("Hard", Rating.HARD),
            ("GOOD", Rating.GOOD),
            (" easy ", Rating.EASY),
            ("1", Rating.AGAIN),
            ("4", Rating.EASY),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_rating(text) == expected

    @pytest.mark.parametrize("text", ["0", "5", "great", "", "-1"])
    def test_invalid(self, text):
        with pytest.raises(UnknownRatingError):
            parse_rating(text)

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            parse_rating("meh")


class TestParsePriority:
    @pytest.mark.parametrize(
        "text,expected",
        [("high", Priority.HIGH), ("Normal", Priority.NORMAL), ("3", Priority.LOW)],
    )
    def test_valid(self, text, expected):
        assert parse_priority(text) == expected

    @pytest.mark.parametrize("text", ["urgent", "0", "4"])
    def test_invalid(self, text):
        with pytest.raises(UnknownPriorityError):
            parse_priority(text)

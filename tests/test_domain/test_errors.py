"""
Tests for typed domain errors.

Verifies that each error class exists, inherits correctly,
and carries the right attributes for downstream handling.
"""

from reading_queue.domain.errors import (
    DomainError,
    QueueFormatError,
    QueueWriteError,
    UnknownPriorityError,
    UnknownRatingError,
)


class TestDomainErrorHierarchy:
    def test_base_error_carries_message(self):
        err = DomainError("something broke")
        assert str(err) == "something broke"

    def test_all_errors_are_domain_errors(self):
        for cls in (QueueFormatError, QueueWriteError, UnknownRatingError, UnknownPriorityError):
            assert issubclass(cls, DomainError)


class TestQueueFormatError:
    def test_reason_only(self):
        err = QueueFormatError("invalid JSON")
        assert err.reason == "invalid JSON"
        assert err.record_index is None
        assert "invalid JSON" in str(err)

    def test_record_index_in_message(self):
        err = QueueFormatError("bad keys", record_index=3)
        assert err.record_index == 3
        assert "record 3" in str(err)


class TestQueueWriteError:
    def test_attributes(self):
        err = QueueWriteError("/vault/queue.md", "disk full")
        assert err.location == "/vault/queue.md"
        assert err.reason == "disk full"
        assert "/vault/queue.md" in str(err)


class TestInputErrors:
    def test_rating_error_is_value_error(self):
        err = UnknownRatingError("meh")
        assert isinstance(err, ValueError)
        assert err.value == "meh"

    def test_priority_error_is_value_error(self):
        err = UnknownPriorityError("urgent")
        assert isinstance(err, ValueError)
        assert "urgent" in str(err)

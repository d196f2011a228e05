"""
Typed domain errors for the reading queue.

Not-found outcomes are not errors here: store operations report them with
``None`` / ``False`` so callers can treat "note left the queue" as routine.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""


class QueueFormatError(DomainError):
    """The persisted queue document could not be parsed or has the wrong shape.

    Raised by the migration layer and absorbed by the queue manager, which
    degrades to an empty queue.
    """

    def __init__(self, reason: str, record_index: Optional[int] = None) -> None:
        self.reason = reason
        self.record_index = record_index
        where = f" (record {record_index})" if record_index is not None else ""
        super().__init__(f"Invalid queue document{where}: {reason}")


class QueueWriteError(DomainError):
    """Persisting the queue failed. Always propagated to the caller."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to write queue to {location}: {reason}")


class UnknownRatingError(DomainError, ValueError):
    """A rating name or number outside Again/Hard/Good/Easy."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown rating: {value!r}")


class UnknownPriorityError(DomainError, ValueError):
    """A priority name or number outside High/Normal/Low."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown priority: {value!r}")

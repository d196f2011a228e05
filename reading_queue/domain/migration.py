"""
Queue document parsing and record migration.

Pure functions: text in, models out. The queue manager runs these during a
load; they can be exercised without any storage.
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

from pydantic import ValidationError

from .errors import QueueFormatError
from .models import (
    DEFAULT_PRIORITY,
    LegacyQueueEntry,
    MemoryState,
    QueueCollection,
    QueueEntry,
)

logger = logging.getLogger(__name__)

StateFactory = Callable[[datetime], MemoryState]

CURRENT_CARD_KEY = "fsrsCard"
LEGACY_DUE_KEY = "dueDate"


def is_current_shape(record: Dict[str, Any]) -> bool:
    return CURRENT_CARD_KEY in record


def is_legacy_shape(record: Dict[str, Any]) -> bool:
    return CURRENT_CARD_KEY not in record and LEGACY_DUE_KEY in record


def migrate_entry(record: Any, initialize_new_state: StateFactory) -> QueueEntry:
    """Convert one stored record into a current-shape ``QueueEntry``.

    Current records are validated and get ``priority`` filled in when absent.
    Legacy records (path, dueDate, intervalDays) become a fresh new card due
    exactly at the legacy due date.

    Raises:
        QueueFormatError: If the record is neither shape or fails validation.
    """
    if not isinstance(record, dict):
        raise QueueFormatError(f"expected an object, got {type(record).__name__}")

    try:
        if is_current_shape(record):
            # a missing or null priority validates to DEFAULT_PRIORITY
            return QueueEntry.model_validate(record)

        if is_legacy_shape(record):
            legacy = LegacyQueueEntry.model_validate(record)
            logger.info(f"Migrating note {legacy.path} from legacy format")
            return QueueEntry(
                path=legacy.path,
                memory_state=initialize_new_state(legacy.due_date),
                priority=DEFAULT_PRIORITY,
            )
    except ValidationError as e:
        raise QueueFormatError(str(e)) from e

    raise QueueFormatError(f"unrecognised record keys: {sorted(record)}")


def parse_queue_document(
    content: str, initialize_new_state: StateFactory
) -> QueueCollection:
    """Parse the queue document and migrate every record.

    A single bad record fails the whole document.

    Raises:
        QueueFormatError: On invalid JSON, wrong top-level shape, or any
            record that cannot be migrated.
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise QueueFormatError(f"invalid JSON: {e}") from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("notes"), list):
        raise QueueFormatError("expected an object with a 'notes' array")

    notes: List[QueueEntry] = []
    for index, record in enumerate(parsed["notes"]):
        try:
            notes.append(migrate_entry(record, initialize_new_state))
        except QueueFormatError as e:
            raise QueueFormatError(e.reason, record_index=index) from e

    return QueueCollection(notes=notes)


def serialize_queue(collection: QueueCollection) -> str:
    """Render the collection as the on-disk JSON document."""
    data = collection.model_dump(mode="json", by_alias=True)
    return json.dumps(data, indent=2, ensure_ascii=False)

"""QueueStorage port -- abstracts the single document holding the queue."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class QueueStorage(Protocol):
    """Reads and writes the serialized queue as UTF-8 text."""

    @property
    def location(self) -> str:
        """Human-readable location of the document, for logs and errors."""
        ...

    async def read(self) -> Optional[str]:
        """Return the document text, or None if it does not exist yet."""
        ...

    async def write(self, content: str) -> None:
        """Create or fully overwrite the document.

        Raises:
            QueueWriteError: If the document could not be written.
        """
        ...

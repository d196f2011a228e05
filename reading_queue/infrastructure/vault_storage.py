"""
QueueStorage adapters.

``VaultQueueStorage`` keeps the queue as a single JSON document inside the
notes vault (``queue.md`` by default, so it can be opened like any note).
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..domain.errors import QueueWriteError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_FILE = "queue.md"


class VaultQueueStorage:
    """Queue document stored as a UTF-8 file in the vault."""

    def __init__(self, vault_path: Path, queue_file: str = DEFAULT_QUEUE_FILE):
        self.vault_path = Path(vault_path).expanduser()
        self.file_path = self.vault_path / queue_file

    @property
    def location(self) -> str:
        return str(self.file_path)

    async def read(self) -> Optional[str]:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, content: str) -> None:
        try:
            await asyncio.to_thread(self._write_sync, content)
        except OSError as e:
            logger.error(f"Failed to write queue file {self.file_path}: {e}")
            raise QueueWriteError(self.location, str(e)) from e

    def _read_sync(self) -> Optional[str]:
        if not self.file_path.is_file():
            return None
        return self.file_path.read_text(encoding="utf-8")

    def _write_sync(self, content: str) -> None:
        created = not self.file_path.exists()
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a sibling temp file and swap it in, so readers never see
        # a half-written document.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.file_path.parent, prefix=f".{self.file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, self.file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        if created:
            logger.info(f"Created queue file {self.file_path}")


class InMemoryQueueStorage:
    """Queue document held in memory. For tests and embedding."""

    def __init__(self, content: Optional[str] = None):
        self.content = content
        self.write_count = 0

    @property
    def location(self) -> str:
        return "<memory>"

    async def read(self) -> Optional[str]:
        return self.content

    async def write(self, content: str) -> None:
        self.content = content
        self.write_count += 1

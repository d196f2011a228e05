"""Domain port protocols for decoupling the queue from infrastructure."""

from .memory_model import MemoryModel
from .queue_storage import QueueStorage

__all__ = ["MemoryModel", "QueueStorage"]

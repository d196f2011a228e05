"""Adapters implementing the domain ports."""

from .fsrs_memory_model import FsrsMemoryModel
from .vault_storage import InMemoryQueueStorage, VaultQueueStorage

__all__ = ["FsrsMemoryModel", "InMemoryQueueStorage", "VaultQueueStorage"]

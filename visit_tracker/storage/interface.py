"""
Record Store Interface

This module defines the storage abstraction that the visit log service works
against. A store holds one ordered collection of visit records and is read and
rewritten as a whole.

To add a new storage backend:
1. Create a new class inheriting from RecordStore
2. Implement load() and save()
3. Pass instances of it to VisitLogService
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List


class RecordStore(ABC):
    """
    Abstract base class for record stores.

    Every store owns an asyncio lock. Callers hold it around a
    load-modify-save cycle so that concurrent requests in the same process
    cannot overwrite each other's changes.
    """

    def __init__(self):
        self.lock = asyncio.Lock()

    @abstractmethod
    async def load(self) -> List[Dict[str, Any]]:
        """
        Return the stored records in insertion order.

        Implementations must never raise for a missing or unreadable
        collection; they return an empty list instead.
        """
        pass

    @abstractmethod
    async def save(self, records: List[Dict[str, Any]]) -> None:
        """
        Replace the stored collection with ``records``.

        Raises:
            StorageError: If the collection cannot be persisted
        """
        pass

"""
Storage module with abstraction layer.

This module provides:
- RecordStore interface: Abstract base class for record collections
- JsonFileStore: JSON document implementation (default)
"""

from visit_tracker.storage.interface import RecordStore
from visit_tracker.storage.json_file_store import JsonFileStore

__all__ = [
    "RecordStore",
    "JsonFileStore",
]

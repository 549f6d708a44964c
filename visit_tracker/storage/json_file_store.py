"""
JSON File Store

Implements RecordStore on top of a single pretty-printed JSON document whose
entire contents are an array of records.

Key characteristics:
- Lazy: a missing document is an empty collection
- Forgiving reads: unparsable or non-array content is discarded as empty
- Whole-document rewrites through a temporary file and rename
- Blocking file I/O runs in a worker thread
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from visit_tracker.core.exceptions import StorageError
from visit_tracker.storage.interface import RecordStore

logger = logging.getLogger(__name__)


class JsonFileStore(RecordStore):
    """Record store backed by one JSON file."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    async def load(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._read)

    async def save(self, records: List[Dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write, records)

    def _read(self) -> List[Dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning(f"Could not read {self.path}, treating as empty: {e}")
            return []
        except UnicodeDecodeError as e:
            logger.warning(f"Discarding non UTF-8 content in {self.path}: {e}")
            return []

        if not raw.strip():
            return []

        # ValueError covers JSONDecodeError and oversized integer literals;
        # RecursionError comes from pathologically nested arrays
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Discarding unparsable content in {self.path}: {e!r}")
            return []

        if not isinstance(data, list):
            logger.warning(
                f"Discarding {type(data).__name__} content in {self.path}, expected a list"
            )
            return []

        return data

    def _write(self, records: List[Dict[str, Any]]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(records, handle, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"failed to write {self.path}", original_error=e) from e

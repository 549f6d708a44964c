"""
Visit Log Service

This service holds the business logic of the tracker:
- Recording a visit in the active log
- Reading the active log back for analytics
- Moving an entry from the active log to the muted log

Design Decisions:
- Works against the RecordStore interface, not files directly
- Every load-modify-save cycle runs under the store's lock, so sequential and
  concurrent calls in one process never lose an update
- mute() takes the visit log lock before the muted log lock, always in that order
- The two logs are written one after the other with no rollback; a failure
  between the writes leaves them inconsistent
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from visit_tracker.api.schemas import VisitRecord
from visit_tracker.core.exceptions import InvalidEntryError
from visit_tracker.storage.interface import RecordStore

logger = logging.getLogger(__name__)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    Format a UTC instant the way visit records store it.

    Example:
        utc_timestamp(datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
        -> "2026-01-02T03:04:05.678Z"
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _matches(record: Any, ip: str, timestamp: str) -> bool:
    return (
        isinstance(record, dict)
        and record.get("ip") == ip
        and record.get("timestamp") == timestamp
    )


class VisitLogService:
    """
    Service for the visit log and the muted log.
    """

    def __init__(self, visits: RecordStore, muted: RecordStore):
        """
        Args:
            visits: Store holding the active visit log
            muted: Store holding muted entries
        """
        self.visits = visits
        self.muted = muted

    async def track(self, ip: str, user_agent: Optional[str] = None) -> int:
        """
        Append a visit stamped with the current time.

        Returns:
            Number of records in the visit log after the append

        Raises:
            StorageError: If the visit log cannot be written
        """
        record = VisitRecord(ip=ip, user_agent=user_agent, timestamp=utc_timestamp())

        async with self.visits.lock:
            records = await self.visits.load()
            records.append(record.to_document())
            await self.visits.save(records)
            total = len(records)

        logger.debug(f"Tracked visit from {ip}, total={total}")
        return total

    async def get_analytics(self) -> List[Dict[str, Any]]:
        """Return the visit log, or an empty list if it is missing or unreadable."""
        return await self.visits.load()

    async def mute(
        self,
        ip: Optional[str],
        timestamp: Optional[str],
        user_agent: Optional[str] = None
    ) -> VisitRecord:
        """
        Move every visit matching (ip, timestamp) into the muted log.

        The entry is appended to the muted log even when nothing matched.

        Returns:
            The record appended to the muted log

        Raises:
            InvalidEntryError: If ip or timestamp is missing
            StorageError: If either log cannot be written
        """
        if not ip:
            raise InvalidEntryError("ip")
        if not timestamp:
            raise InvalidEntryError("timestamp")

        entry = VisitRecord(ip=ip, user_agent=user_agent, timestamp=timestamp)

        async with self.visits.lock, self.muted.lock:
            records = await self.visits.load()
            muted = await self.muted.load()

            kept = [r for r in records if not _matches(r, ip, timestamp)]
            muted.append(entry.to_document())

            await self.visits.save(kept)
            await self.muted.save(muted)

        logger.info(
            f"Muted entry ip={ip} timestamp={timestamp} "
            f"(removed {len(records) - len(kept)} from visit log)"
        )
        return entry

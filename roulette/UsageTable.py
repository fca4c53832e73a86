from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from shared.log import get_logger

logger = get_logger(__name__)

# Spins are forgiven after two days without spinning
DEFAULT_TTL = 2 * 24 * 60 * 60.0


@dataclass
class UsageRecord:
    count: int
    last_seen: float


class UsageTable:
    """
    Per-user spin counter with a rolling expiry window.

    Expiry is checked lazily on lookup; an expired record behaves as if it
    did not exist and is overwritten by the next spin. Not thread safe: the
    session loop is the only writer.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the usage table.

        Args:
            ttl: Seconds since a user's last spin after which the count resets (default 2 days)
            clock: Time source, monotonic seconds
        """
        self.ttl = ttl
        self._clock = clock
        self._records: Dict[str, UsageRecord] = {}

    def _live_record(self, user_id: str) -> Optional[UsageRecord]:
        record = self._records.get(user_id)
        if record is None:
            return None
        if self._clock() - record.last_seen > self.ttl:
            return None
        return record

    def count_for(self, user_id: str) -> int:
        """Spins by ``user_id`` inside the window, 0 if none or expired."""
        record = self._live_record(user_id)
        return record.count if record else 0

    def record_spin(self, user_id: str) -> int:
        """
        Count one spin for ``user_id`` and refresh its timestamp.

        Returns:
            The new count
        """
        record = self._live_record(user_id)
        count = record.count + 1 if record else 1
        self._records[user_id] = UsageRecord(count=count, last_seen=self._clock())
        logger.debug("User %s has spun %d time(s)", user_id, count)
        return count

    def clear(self) -> None:
        self._records.clear()

    def size(self) -> int:
        """Number of stored records, expired ones included."""
        return len(self._records)

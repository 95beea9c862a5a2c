"""Connection registry contract and the in-memory implementation.

The registry maps connection identity -> expiry deadline. Every broadcast
reads one snapshot from it and feeds "recipient gone" outcomes back as
removals, so the registry heals itself without a separate reaper.

The in-memory registry is used for local runs (no ``TABLE_NAME``) and
tests. It takes no lock: each operation touches a single key and completes
without awaiting, so it is atomic on the event loop.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional, Protocol

from .connection_info import ConnectionRecord

logger = logging.getLogger(__name__)


class ConnectionRegistry(Protocol):
    """Durable identity -> expiry mapping consumed by the broadcast core.

    All operations raise ``StoreUnavailableError`` when the backing store
    cannot be reached.
    """

    async def upsert(self, connection_id: str, ttl_seconds: int) -> ConnectionRecord:
        ...

    async def remove(self, connection_id: str) -> None:
        ...

    async def list_all(self) -> List[str]:
        ...


class InMemoryConnectionRegistry:
    """Process-local registry of connection records."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._records: Dict[str, ConnectionRecord] = {}
        self._clock = clock

    async def upsert(self, connection_id: str, ttl_seconds: int) -> ConnectionRecord:
        """Store or replace the record for ``connection_id``."""
        record = ConnectionRecord.from_ttl(connection_id, ttl_seconds, now=self._clock())
        replaced = connection_id in self._records
        self._records[connection_id] = record
        logger.debug(
            "%s connection %s (expires_at=%s, total=%d)",
            "Refreshed" if replaced else "Registered",
            connection_id,
            record.expires_at,
            len(self._records),
        )
        return record

    async def remove(self, connection_id: str) -> None:
        """Delete the record; unknown identities are ignored."""
        if self._records.pop(connection_id, None) is not None:
            logger.debug(
                "Removed connection %s (remaining: %d)", connection_id, len(self._records)
            )

    async def list_all(self) -> List[str]:
        """Snapshot of every stored identity, expired ones included."""
        return list(self._records)

    async def get(self, connection_id: str) -> Optional[ConnectionRecord]:
        return self._records.get(connection_id)

    def purge_expired(self) -> int:
        """Drop records past their deadline, mirroring store-side TTL eviction."""
        now = self._clock()
        expired = [cid for cid, record in self._records.items() if record.is_expired(now)]
        for connection_id in expired:
            del self._records[connection_id]
        if expired:
            logger.info("Evicted %d expired connection record(s)", len(expired))
        return len(expired)

    @property
    def active_count(self) -> int:
        """Number of stored connection records."""
        return len(self._records)


__all__ = ["ConnectionRegistry", "InMemoryConnectionRegistry"]

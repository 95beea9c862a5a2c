"""Connection record stored for every live WebSocket connection."""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ConnectionRecord:
    """One registry entry: who is connected and until when we keep them."""

    connection_id: str
    expires_at: int  # epoch seconds

    @classmethod
    def from_ttl(cls, connection_id: str, ttl_seconds: int, *, now: float | None = None) -> "ConnectionRecord":
        current = time.time() if now is None else now
        return cls(connection_id=connection_id, expires_at=int(current + ttl_seconds))

    def is_expired(self, now: float | None = None) -> bool:
        """Advisory only; the broadcast path never consults it."""
        current = time.time() if now is None else now
        return current >= self.expires_at


__all__ = ["ConnectionRecord"]

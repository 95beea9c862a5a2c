"""Delivery channel contract shared by every push transport."""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class DeliveryOutcome(str, Enum):
    """How a single push to one connection resolved."""

    DELIVERED = "delivered"
    GONE_STALE = "gone_stale"
    TRANSIENT_FAILURE = "transient_failure"


class DeliveryChannel(Protocol):
    """Push a payload to one connection and classify the result.

    Implementations report "recipient permanently gone" as
    ``DeliveryOutcome.GONE_STALE`` instead of raising.
    """

    async def send(self, connection_id: str, payload: str) -> DeliveryOutcome:
        ...


__all__ = ["DeliveryChannel", "DeliveryOutcome"]

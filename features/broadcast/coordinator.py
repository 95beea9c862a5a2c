"""Fan a payload out to every registered connection.

One broadcast works over exactly one registry snapshot:

1. ``list_all()`` is read once. A failing read fails the broadcast before
   any delivery is attempted.
2. Every identity in the snapshot gets its own delivery coroutine; all of
   them run concurrently and are joined with ``asyncio.gather``.
3. ``GONE_STALE`` outcomes remove the identity from the registry
   (best-effort), ``TRANSIENT_FAILURE`` outcomes are only logged.

A per-connection coroutine never raises, so one bad recipient can neither
cancel its siblings nor fail the broadcast.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from core.connections import ConnectionRegistry, DeliveryChannel, DeliveryOutcome
from core.exceptions import StoreUnavailableError

from .schemas import DeliveryReport

logger = logging.getLogger(__name__)


class BroadcastCoordinator:
    """Deliver one payload to all connections and reconcile the registry."""

    def __init__(self, registry: ConnectionRegistry, channel: DeliveryChannel) -> None:
        self._registry = registry
        self._channel = channel

    async def broadcast(self, payload: str) -> DeliveryReport:
        """Send ``payload`` to the current snapshot of connections.

        Raises:
            StoreUnavailableError: the registry snapshot could not be read.
        """

        logger.info("Fetching all connection ids for broadcast")
        snapshot = await self._registry.list_all()
        report = DeliveryReport(total=len(snapshot))

        if not snapshot:
            logger.info("No connections registered, nothing to send")
            return report

        logger.info("Broadcasting to %d connection(s)", len(snapshot))
        outcomes: List[DeliveryOutcome] = await asyncio.gather(
            *(self._deliver(connection_id, payload, report) for connection_id in snapshot)
        )

        for outcome in outcomes:
            if outcome is DeliveryOutcome.DELIVERED:
                report.delivered += 1
            elif outcome is DeliveryOutcome.GONE_STALE:
                report.stale += 1
            else:
                report.transient += 1

        logger.info(
            "Broadcast finished: delivered=%d stale=%d transient=%d cleanup_failures=%d",
            report.delivered,
            report.stale,
            report.transient,
            report.cleanup_failures,
        )
        return report

    async def _deliver(
        self,
        connection_id: str,
        payload: str,
        report: DeliveryReport,
    ) -> DeliveryOutcome:
        try:
            outcome = await self._channel.send(connection_id, payload)
        except Exception as exc:
            logger.error("Unexpected error posting to connection %s: %s", connection_id, exc, exc_info=True)
            return DeliveryOutcome.TRANSIENT_FAILURE

        if outcome is DeliveryOutcome.GONE_STALE:
            logger.info("Found stale connection, deleting connection id %s", connection_id)
            try:
                await self._registry.remove(connection_id)
            except StoreUnavailableError as exc:
                report.cleanup_failures += 1
                logger.warning("Could not delete stale connection %s: %s", connection_id, exc)
            except Exception as exc:
                report.cleanup_failures += 1
                logger.error("Unexpected error deleting stale connection %s: %s", connection_id, exc, exc_info=True)
        elif outcome is DeliveryOutcome.TRANSIENT_FAILURE:
            logger.warning("Delivery to connection %s failed, keeping it registered", connection_id)

        return outcome


__all__ = ["BroadcastCoordinator"]

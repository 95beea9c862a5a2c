"""In-process WebSocket transport used when running the FastAPI app.

Plays the role API Gateway plays in production: it assigns an identity to
every accepted socket and acts as the delivery channel that pushes
payloads back to them.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Optional

from fastapi import WebSocket
from fastapi.websockets import WebSocketDisconnect
from starlette.websockets import WebSocketState

from core.connections import DeliveryOutcome

logger = logging.getLogger(__name__)


def new_connection_id() -> str:
    return uuid.uuid4().hex


class LocalConnectionHub:
    """Map connection identities to live sockets and push to them."""

    def __init__(self) -> None:
        self._sockets: Dict[str, WebSocket] = {}

    def attach(self, websocket: WebSocket, connection_id: Optional[str] = None) -> str:
        connection_id = connection_id or new_connection_id()
        self._sockets[connection_id] = websocket
        logger.debug("Attached socket for connection %s (open: %d)", connection_id, len(self._sockets))
        return connection_id

    def detach(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)

    @property
    def open_count(self) -> int:
        return len(self._sockets)

    async def send(self, connection_id: str, payload: str) -> DeliveryOutcome:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return DeliveryOutcome.GONE_STALE

        if websocket.application_state != WebSocketState.CONNECTED:
            self.detach(connection_id)
            return DeliveryOutcome.GONE_STALE

        try:
            await websocket.send_text(payload)
        except (WebSocketDisconnect, RuntimeError) as exc:
            # Starlette raises RuntimeError once the close frame went out
            logger.info("Socket for connection %s is closed: %s", connection_id, exc)
            self.detach(connection_id)
            return DeliveryOutcome.GONE_STALE
        return DeliveryOutcome.DELIVERED


__all__ = ["LocalConnectionHub", "new_connection_id"]

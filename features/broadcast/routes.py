"""HTTP and WebSocket endpoints for running the broadcaster locally.

- ``WS /ws`` accepts clients the way API Gateway would: every accepted
  socket gets an identity, is registered through the ``$connect`` flow and
  removed through ``$disconnect`` when it closes. Each text frame is routed
  by its JSON ``action`` member, so ``{"action": "post", "data": ...}``
  broadcasts to everyone connected.
- ``POST /api/v1/broadcast/events`` accepts one raw gateway event and
  returns the handler's status code and body as plain text.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, WebSocket
from fastapi.responses import PlainTextResponse
from fastapi.websockets import WebSocketDisconnect

from config.broadcast import DEFAULT_ROUTE_KEY
from core.observability import log_websocket_request

from .dependencies import BroadcastRuntime, get_broadcast_runtime
from .events import ConnectEvent, DisconnectEvent
from .local_transport import new_connection_id
from .schemas import HandlerResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/broadcast", tags=["Broadcast"])
websocket_router = APIRouter()


def _route_key_for_frame(text: str) -> str:
    """Mimic the ``$request.body.action`` route selection expression."""

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return DEFAULT_ROUTE_KEY
    if isinstance(parsed, dict) and isinstance(parsed.get("action"), str):
        return parsed["action"]
    return DEFAULT_ROUTE_KEY


def build_frame_event(connection_id: str, text: str) -> Dict[str, Any]:
    """Shape a received frame like the event API Gateway would emit."""

    return {
        "requestContext": {
            "routeKey": _route_key_for_frame(text),
            "connectionId": connection_id,
        },
        "body": text,
    }


@router.post("/events", summary="Dispatch one raw gateway event")
async def dispatch_event(
    event: Dict[str, Any] = Body(..., description="API Gateway WebSocket proxy event"),
    runtime: BroadcastRuntime = Depends(get_broadcast_runtime),
) -> PlainTextResponse:
    response = await runtime.handler.handle_raw(event)
    return PlainTextResponse(response.body, status_code=response.status_code)


@websocket_router.websocket("/ws")
async def broadcast_websocket(
    websocket: WebSocket,
    runtime: BroadcastRuntime = Depends(get_broadcast_runtime),
) -> None:
    log_websocket_request(websocket, logger=logger, label="Broadcast WebSocket")

    await websocket.accept()
    connection_id = runtime.hub.attach(websocket, new_connection_id())

    connected = await runtime.handler.handle(ConnectEvent(connection_id=connection_id))
    if connected.status_code != 200:
        runtime.hub.detach(connection_id)
        logger.warning("Rejecting connection %s: %s", connection_id, connected.body)
        # close reasons are capped at 123 bytes
        await websocket.close(code=1011, reason=connected.body[:120])
        return

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("Connection %s closed by client", connection_id)
                break

            text = message.get("text")
            if text is None:
                # the gateway routes text frames only
                response = HandlerResponse(400, "Binary frames are not supported")
            else:
                response = await runtime.handler.handle_raw(build_frame_event(connection_id, text))
            if response.status_code != 200:
                await websocket.send_json(
                    {
                        "type": "error",
                        "status_code": response.status_code,
                        "message": response.body,
                    }
                )
    except WebSocketDisconnect:
        logger.info("Connection %s closed by client", connection_id)
    finally:
        runtime.hub.detach(connection_id)
        await runtime.handler.handle(DisconnectEvent(connection_id=connection_id))


__all__ = ["build_frame_event", "router", "websocket_router"]

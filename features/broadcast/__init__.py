"""Connection fan-out broadcast feature.

Routes and FastAPI wiring live in ``routes``/``dependencies`` and are not
imported here so the Lambda entry point only loads what it dispatches to.
"""

from __future__ import annotations

from .coordinator import BroadcastCoordinator
from .events import (
    ConnectEvent,
    DisconnectEvent,
    Event,
    PostEvent,
    UnrecognizedEvent,
    parse_event,
)
from .handler import ChannelFactory, LifecycleHandler
from .schemas import DeliveryReport, HandlerResponse, decode_post_body

__all__ = [
    "BroadcastCoordinator",
    "ChannelFactory",
    "ConnectEvent",
    "DeliveryReport",
    "DisconnectEvent",
    "Event",
    "HandlerResponse",
    "LifecycleHandler",
    "PostEvent",
    "UnrecognizedEvent",
    "decode_post_body",
    "parse_event",
]

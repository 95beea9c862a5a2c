"""Closed set of lifecycle events delivered by the WebSocket transport.

Raw gateway events (API Gateway WebSocket proxy format) are validated with
pydantic and narrowed into exactly one of the event dataclasses below.
Anything that does not map onto a known route becomes an
:class:`UnrecognizedEvent` rather than falling through a default branch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from config.broadcast import ROUTE_CONNECT, ROUTE_DISCONNECT, ROUTE_POST

logger = logging.getLogger(__name__)


class GatewayRequestContext(BaseModel):
    """Subset of ``requestContext`` the broadcaster relies on."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    route_key: Optional[str] = Field(default=None, alias="routeKey")
    connection_id: Optional[str] = Field(default=None, alias="connectionId")
    domain_name: Optional[str] = Field(default=None, alias="domainName")
    stage: Optional[str] = None


class GatewayEvent(BaseModel):
    """Raw event as handed over by the transport."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_context: GatewayRequestContext = Field(
        default_factory=GatewayRequestContext, alias="requestContext"
    )
    body: Optional[str] = None

    @property
    def endpoint_url(self) -> Optional[str]:
        """Callback URL for pushing to connections of this API stage."""
        ctx = self.request_context
        if not ctx.domain_name or not ctx.stage:
            return None
        return f"https://{ctx.domain_name}/{ctx.stage}"


@dataclass(slots=True, frozen=True)
class ConnectEvent:
    connection_id: str


@dataclass(slots=True, frozen=True)
class DisconnectEvent:
    connection_id: str


@dataclass(slots=True, frozen=True)
class PostEvent:
    connection_id: Optional[str]
    body: Optional[str]
    endpoint_url: Optional[str] = None


@dataclass(slots=True, frozen=True)
class UnrecognizedEvent:
    route_key: Optional[str]
    reason: str = "unknown route key"


Event = Union[ConnectEvent, DisconnectEvent, PostEvent, UnrecognizedEvent]


def parse_event(raw: Mapping[str, Any]) -> Event:
    """Narrow a raw gateway event into one :data:`Event` variant."""

    try:
        gateway_event = GatewayEvent.model_validate(raw)
    except PydanticValidationError as exc:
        logger.warning("Gateway event failed validation: %s", exc.errors())
        return UnrecognizedEvent(route_key=None, reason="invalid event structure")

    ctx = gateway_event.request_context
    route_key = ctx.route_key

    if route_key == ROUTE_CONNECT or route_key == ROUTE_DISCONNECT:
        if not ctx.connection_id:
            return UnrecognizedEvent(route_key=route_key, reason="missing connection id")
        if route_key == ROUTE_CONNECT:
            return ConnectEvent(connection_id=ctx.connection_id)
        return DisconnectEvent(connection_id=ctx.connection_id)

    if route_key == ROUTE_POST:
        return PostEvent(
            connection_id=ctx.connection_id,
            body=gateway_event.body,
            endpoint_url=gateway_event.endpoint_url,
        )

    return UnrecognizedEvent(route_key=route_key)


__all__ = [
    "ConnectEvent",
    "DisconnectEvent",
    "Event",
    "GatewayEvent",
    "GatewayRequestContext",
    "PostEvent",
    "UnrecognizedEvent",
    "parse_event",
]

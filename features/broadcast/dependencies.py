"""Wiring helpers for the broadcast feature."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.requests import HTTPConnection

from config.aws import TABLE_NAME
from core.connections import ConnectionRegistry, DeliveryChannel, InMemoryConnectionRegistry
from core.exceptions import ConfigurationError
from infrastructure.aws.connection_store import DynamoConnectionRegistry
from infrastructure.aws.delivery import ApiGatewayDeliveryChannel

from .events import PostEvent
from .handler import LifecycleHandler
from .local_transport import LocalConnectionHub

logger = logging.getLogger(__name__)


def build_registry(table_name: str | None = None) -> ConnectionRegistry:
    """Return the DynamoDB registry when a table is configured, else in-memory."""

    resolved = table_name if table_name is not None else TABLE_NAME
    if resolved:
        logger.info("Using DynamoDB connection registry (table=%s)", resolved)
        return DynamoConnectionRegistry(table_name=resolved)
    logger.info("TABLE_NAME not set, using in-memory connection registry")
    return InMemoryConnectionRegistry()


def gateway_channel_factory(event: PostEvent) -> DeliveryChannel:
    """Build the API Gateway channel for the stage that raised ``event``."""

    if not event.endpoint_url:
        raise ConfigurationError(
            "Post event carries no domainName/stage to push through",
            key="requestContext.domainName",
        )
    return ApiGatewayDeliveryChannel(endpoint_url=event.endpoint_url)


@dataclass(slots=True)
class BroadcastRuntime:
    """Objects shared by the HTTP and WebSocket routes of one app instance."""

    registry: ConnectionRegistry
    hub: LocalConnectionHub
    handler: LifecycleHandler


def build_local_runtime(registry: ConnectionRegistry | None = None) -> BroadcastRuntime:
    """Wire a handler whose deliveries go to sockets held by this process."""

    resolved_registry = registry if registry is not None else build_registry()
    hub = LocalConnectionHub()
    handler = LifecycleHandler(resolved_registry, lambda _event: hub)
    return BroadcastRuntime(registry=resolved_registry, hub=hub, handler=handler)


def get_broadcast_runtime(connection: HTTPConnection) -> BroadcastRuntime:
    """FastAPI dependency returning the runtime stored on the application."""

    return connection.app.state.broadcast_runtime


__all__ = [
    "BroadcastRuntime",
    "build_local_runtime",
    "build_registry",
    "gateway_channel_factory",
    "get_broadcast_runtime",
]

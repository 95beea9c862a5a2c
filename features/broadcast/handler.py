"""Translate lifecycle events into registry and broadcast operations."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from config.broadcast import CONNECTION_TTL_SECONDS
from core.connections import ConnectionRegistry, DeliveryChannel
from core.exceptions import ConfigurationError, MalformedPayloadError, StoreUnavailableError
from core.observability import render_payload_preview

from .coordinator import BroadcastCoordinator
from .events import (
    ConnectEvent,
    DisconnectEvent,
    Event,
    PostEvent,
    UnrecognizedEvent,
    parse_event,
)
from .schemas import HandlerResponse, decode_post_body

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[PostEvent], DeliveryChannel]


class LifecycleHandler:
    """Stateless dispatcher for connect, disconnect and post events.

    The registry and the delivery channel factory are injected; the
    factory is consulted per post event because the push endpoint depends
    on the API stage that raised the event.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        channel_factory: ChannelFactory,
        *,
        ttl_seconds: int = CONNECTION_TTL_SECONDS,
    ) -> None:
        self._registry = registry
        self._channel_factory = channel_factory
        self._ttl_seconds = ttl_seconds

    async def handle_raw(self, raw_event: Mapping[str, Any]) -> HandlerResponse:
        """Parse a raw gateway event and dispatch it."""

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Received event: %s", render_payload_preview(raw_event))
        return await self.handle(parse_event(raw_event))

    async def handle(self, event: Event) -> HandlerResponse:
        if isinstance(event, ConnectEvent):
            return await self._on_connect(event)
        if isinstance(event, DisconnectEvent):
            return await self._on_disconnect(event)
        if isinstance(event, PostEvent):
            return await self._on_post(event)
        if isinstance(event, UnrecognizedEvent):
            logger.info("Invalid route key: %s (%s)", event.route_key, event.reason)
            return HandlerResponse(400, "Invalid route key")
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    async def _on_connect(self, event: ConnectEvent) -> HandlerResponse:
        logger.info("Handling $connect for connection %s", event.connection_id)
        try:
            await self._registry.upsert(event.connection_id, self._ttl_seconds)
        except StoreUnavailableError as exc:
            logger.error("Error storing connection %s: %s", event.connection_id, exc)
            return HandlerResponse(500, f"Failed to connect: {exc}")

        logger.info("Connection %s stored", event.connection_id)
        return HandlerResponse(200, "Connected.")

    async def _on_disconnect(self, event: DisconnectEvent) -> HandlerResponse:
        logger.info("Handling $disconnect for connection %s", event.connection_id)
        try:
            await self._registry.remove(event.connection_id)
        except StoreUnavailableError as exc:
            logger.error("Error deleting connection %s: %s", event.connection_id, exc)
            return HandlerResponse(500, f"Failed to disconnect: {exc}")

        logger.info("Connection %s removed", event.connection_id)
        return HandlerResponse(200, "Disconnected.")

    async def _on_post(self, event: PostEvent) -> HandlerResponse:
        logger.info("Handling post from connection %s", event.connection_id or "<unknown>")
        try:
            payload = decode_post_body(event.body)
        except MalformedPayloadError as exc:
            logger.info("Rejected post with malformed payload: %s", exc.message)
            return HandlerResponse(400, f"Malformed payload: {exc.message}")

        try:
            channel = self._channel_factory(event)
        except ConfigurationError as exc:
            logger.error("Cannot build delivery channel: %s", exc)
            return HandlerResponse(500, f"Failed to send data: {exc}")

        coordinator = BroadcastCoordinator(self._registry, channel)
        try:
            report = await coordinator.broadcast(payload)
        except StoreUnavailableError as exc:
            logger.error("Error fetching connection ids: %s", exc)
            return HandlerResponse(500, f"Failed to send data: {exc}")

        logger.info("Post delivered: %s", report.to_dict())
        return HandlerResponse(200, "Data sent.")


__all__ = ["ChannelFactory", "LifecycleHandler"]

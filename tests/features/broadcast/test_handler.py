"""Tests for lifecycle event dispatch."""

import asyncio
import json
import logging
from unittest.mock import MagicMock

import pytest

from core.connections import DeliveryOutcome, InMemoryConnectionRegistry
from core.exceptions import ConfigurationError
from features.broadcast.events import ConnectEvent, DisconnectEvent, PostEvent, UnrecognizedEvent
from features.broadcast.handler import LifecycleHandler
from tests.helpers.broadcast import FlakyRegistry, RecordingChannel, gateway_event


@pytest.fixture
def registry():
    return InMemoryConnectionRegistry()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def handler(registry, channel):
    return LifecycleHandler(registry, lambda _event: channel)


def _post(data) -> str:
    return json.dumps({"action": "post", "data": data})


class TestConnectAndDisconnect:
    """Registry mutations driven by $connect / $disconnect."""

    @pytest.mark.asyncio
    async def test_connect_registers_with_one_hour_ttl(self, channel):
        registry = InMemoryConnectionRegistry(clock=lambda: 1_000.5)
        handler = LifecycleHandler(registry, lambda _event: channel)

        response = await handler.handle_raw(gateway_event("$connect", connection_id="abc"))

        assert (response.status_code, response.body) == (200, "Connected.")
        record = await registry.get("abc")
        assert record is not None
        assert record.expires_at == 4_600

    @pytest.mark.asyncio
    async def test_connect_twice_keeps_single_record(self, handler, registry):
        await handler.handle(ConnectEvent("abc"))
        await handler.handle(ConnectEvent("abc"))

        assert await registry.list_all() == ["abc"]

    @pytest.mark.asyncio
    async def test_connect_then_disconnect(self, handler, registry):
        await handler.handle(ConnectEvent("abc"))
        response = await handler.handle_raw(gateway_event("$disconnect", connection_id="abc"))

        assert (response.status_code, response.body) == (200, "Disconnected.")
        assert await registry.get("abc") is None

    @pytest.mark.asyncio
    async def test_disconnect_unknown_identity_succeeds(self, handler):
        response = await handler.handle(DisconnectEvent("never-connected"))
        assert (response.status_code, response.body) == (200, "Disconnected.")

    @pytest.mark.asyncio
    async def test_store_failure_on_connect_is_server_error(self, channel):
        handler = LifecycleHandler(FlakyRegistry(fail_upsert=True), lambda _event: channel)

        response = await handler.handle(ConnectEvent("abc"))

        assert response.status_code == 500
        assert response.body.startswith("Failed to connect: ")

    @pytest.mark.asyncio
    async def test_store_failure_on_disconnect_is_server_error(self, channel):
        handler = LifecycleHandler(FlakyRegistry(fail_remove=True), lambda _event: channel)

        response = await handler.handle(DisconnectEvent("abc"))

        assert response.status_code == 500
        assert response.body.startswith("Failed to disconnect: ")

    @pytest.mark.asyncio
    async def test_concurrent_connects_both_present(self, handler, registry):
        first, second = await asyncio.gather(
            handler.handle(ConnectEvent("A")),
            handler.handle(ConnectEvent("B")),
        )

        assert first.status_code == second.status_code == 200
        assert sorted(await registry.list_all()) == ["A", "B"]


class TestPost:
    """Broadcast path driven by the post route."""

    @pytest.mark.asyncio
    async def test_post_fans_out_to_every_connection(self, handler, registry, channel):
        for connection_id in ("a", "b"):
            await handler.handle(ConnectEvent(connection_id))

        response = await handler.handle_raw(gateway_event("post", connection_id="a", body=_post("hi")))

        assert (response.status_code, response.body) == (200, "Data sent.")
        assert sorted(channel.sent) == [("a", "hi"), ("b", "hi")]

    @pytest.mark.asyncio
    async def test_post_purges_gone_connection(self, handler, registry, channel):
        for connection_id in ("a", "gone"):
            await handler.handle(ConnectEvent(connection_id))
        channel.outcomes["gone"] = DeliveryOutcome.GONE_STALE

        response = await handler.handle(PostEvent("a", _post({"n": 1})))

        assert response.status_code == 200
        assert await registry.list_all() == ["a"]

    @pytest.mark.asyncio
    async def test_malformed_payload_never_touches_registry(self, channel):
        registry = MagicMock()
        factory = MagicMock(return_value=channel)
        handler = LifecycleHandler(registry, factory)

        response = await handler.handle(PostEvent("a", "definitely not json"))

        assert response.status_code == 400
        assert response.body.startswith("Malformed payload: ")
        assert registry.mock_calls == []
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_snapshot_failure_is_server_error(self, channel):
        registry = FlakyRegistry(fail_list=True)
        handler = LifecycleHandler(registry, lambda _event: channel)

        response = await handler.handle(PostEvent("a", _post("hi")))

        assert response.status_code == 500
        assert response.body.startswith("Failed to send data: ")
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_missing_channel_configuration_is_server_error(self, registry):
        def _factory(_event):
            raise ConfigurationError("no endpoint", key="requestContext.domainName")

        handler = LifecycleHandler(registry, _factory)

        response = await handler.handle(PostEvent("a", _post("hi")))

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_channel_factory_receives_the_post_event(self, registry, channel):
        seen = []

        def _factory(event):
            seen.append(event)
            return channel

        handler = LifecycleHandler(registry, _factory)
        await handler.handle_raw(gateway_event("post", body=_post("hi")))

        assert seen[0].endpoint_url == "https://abc123.execute-api.us-east-1.amazonaws.com/prod"


class TestUnrecognized:
    @pytest.mark.asyncio
    async def test_unknown_route_is_client_error_without_side_effects(self, channel):
        registry = MagicMock()
        handler = LifecycleHandler(registry, lambda _event: channel)

        response = await handler.handle_raw(gateway_event("sendmessage"))

        assert (response.status_code, response.body) == (400, "Invalid route key")
        assert registry.mock_calls == []
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_explicit_unrecognized_variant(self, handler, registry):
        response = await handler.handle(UnrecognizedEvent(route_key=None))

        assert response.status_code == 400
        assert await registry.list_all() == []

    @pytest.mark.asyncio
    async def test_foreign_event_type_is_rejected(self, handler):
        with pytest.raises(TypeError):
            await handler.handle(object())  # type: ignore[arg-type]


class TestEventPreviewLogging:
    @pytest.mark.asyncio
    async def test_preview_skipped_when_debug_disabled(self, handler, monkeypatch, caplog):
        preview = MagicMock(return_value="{}")
        monkeypatch.setattr("features.broadcast.handler.render_payload_preview", preview)
        caplog.set_level(logging.INFO, logger="features.broadcast.handler")

        await handler.handle_raw(gateway_event("$connect"))

        preview.assert_not_called()

    @pytest.mark.asyncio
    async def test_preview_rendered_at_debug(self, handler, monkeypatch, caplog):
        preview = MagicMock(return_value="{redacted}")
        monkeypatch.setattr("features.broadcast.handler.render_payload_preview", preview)
        caplog.set_level(logging.DEBUG, logger="features.broadcast.handler")

        await handler.handle_raw(gateway_event("$connect"))

        preview.assert_called_once()
        assert "Received event: {redacted}" in caplog.text

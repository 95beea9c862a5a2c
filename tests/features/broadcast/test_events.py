"""Tests for narrowing raw gateway events into lifecycle events."""

import pytest

from features.broadcast.events import (
    ConnectEvent,
    DisconnectEvent,
    PostEvent,
    UnrecognizedEvent,
    parse_event,
)
from tests.helpers.broadcast import gateway_event


def test_connect_route():
    assert parse_event(gateway_event("$connect", connection_id="abc=")) == ConnectEvent("abc=")


def test_disconnect_route():
    assert parse_event(gateway_event("$disconnect", connection_id="abc=")) == DisconnectEvent("abc=")


def test_post_route_carries_body_and_endpoint():
    event = parse_event(gateway_event("post", body='{"data": "hi"}'))

    assert isinstance(event, PostEvent)
    assert event.body == '{"data": "hi"}'
    assert event.endpoint_url == "https://abc123.execute-api.us-east-1.amazonaws.com/prod"


def test_post_without_stage_has_no_endpoint():
    event = parse_event(gateway_event("post", body="{}", stage=None))
    assert isinstance(event, PostEvent)
    assert event.endpoint_url is None


@pytest.mark.parametrize("route_key", ["$default", "sendmessage", "POST", None])
def test_unknown_routes_are_unrecognized(route_key):
    event = parse_event(gateway_event(route_key))
    assert isinstance(event, UnrecognizedEvent)
    assert event.route_key == route_key


def test_connect_without_connection_id_is_unrecognized():
    event = parse_event(gateway_event("$connect", connection_id=None))
    assert isinstance(event, UnrecognizedEvent)
    assert event.reason == "missing connection id"


@pytest.mark.parametrize("raw", [{}, {"requestContext": "nope"}, {"requestContext": {"routeKey": 5}}])
def test_structurally_invalid_events_are_unrecognized(raw):
    assert isinstance(parse_event(raw), UnrecognizedEvent)

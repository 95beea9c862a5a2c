"""Tests for the AWS Lambda entry point."""

import json
from types import SimpleNamespace

import pytest

import lambda_function
from core.connections import InMemoryConnectionRegistry
from core.exceptions import ConfigurationError
from features.broadcast.handler import LifecycleHandler
from tests.helpers.broadcast import RecordingChannel, gateway_event


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def registry(monkeypatch, channel):
    registry = InMemoryConnectionRegistry()
    monkeypatch.setattr(
        lambda_function,
        "_lifecycle_handler",
        LifecycleHandler(registry, lambda _event: channel),
    )
    return registry


CONTEXT = SimpleNamespace(aws_request_id="req-123")


def test_connect_returns_proxy_response(registry):
    result = lambda_function.handler(gateway_event("$connect", connection_id="abc"), CONTEXT)

    assert result == {"statusCode": 200, "body": "Connected."}
    assert registry.active_count == 1


def test_post_broadcasts_to_registered_connections(registry, channel):
    lambda_function.handler(gateway_event("$connect", connection_id="a"), CONTEXT)
    lambda_function.handler(gateway_event("$connect", connection_id="b"), CONTEXT)

    result = lambda_function.handler(
        gateway_event("post", connection_id="a", body=json.dumps({"action": "post", "data": "hi"})),
        None,
    )

    assert result == {"statusCode": 200, "body": "Data sent."}
    assert sorted(channel.sent) == [("a", "hi"), ("b", "hi")]


def test_invalid_route_is_rejected(registry):
    result = lambda_function.handler({"requestContext": {"routeKey": "bogus"}}, CONTEXT)

    assert result == {"statusCode": 400, "body": "Invalid route key"}
    assert registry.active_count == 0


def test_missing_table_name_fails_at_first_invocation(monkeypatch):
    monkeypatch.setattr(lambda_function, "_lifecycle_handler", None)
    monkeypatch.delenv("TABLE_NAME", raising=False)

    with pytest.raises(ConfigurationError) as exc_info:
        lambda_function.get_lifecycle_handler()

    assert exc_info.value.key == "TABLE_NAME"

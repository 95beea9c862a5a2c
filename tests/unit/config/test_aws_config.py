"""Tests for AWS configuration constants."""

import importlib

import pytest

import config
import config.aws


@pytest.fixture
def reload_aws_config(monkeypatch):
    yield lambda: importlib.reload(config.aws)
    monkeypatch.undo()
    importlib.reload(config.aws)


def test_region_defaults_regardless_of_node_env(monkeypatch, reload_aws_config):
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.setenv("NODE_ENV", "production")

    module = reload_aws_config()

    assert module.AWS_REGION == "us-east-1"
    assert module.TABLE_NAME == ""


def test_values_come_from_environment(monkeypatch, reload_aws_config):
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    monkeypatch.setenv("TABLE_NAME", "connections")
    monkeypatch.setenv("DYNAMODB_ENDPOINT_URL", "")

    module = reload_aws_config()

    assert (module.AWS_REGION, module.TABLE_NAME) == ("eu-west-1", "connections")
    assert module.DYNAMODB_ENDPOINT_URL is None


def test_only_known_config_modules_are_exported():
    assert config.__all__ == ["aws", "broadcast"]
    with pytest.raises(AttributeError):
        getattr(config, "environment")

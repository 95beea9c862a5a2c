"""Build AWS service clients used by the infrastructure layer.

Clients are created lazily and cached per process so that warm Lambda
containers reuse their HTTP connection pools between invocations. Core
components never reach for this cache; entry points fetch clients here and
inject them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import boto3
from botocore.config import Config as BotoConfig

from config.aws import AWS_REGION, DYNAMODB_ENDPOINT_URL

logger = logging.getLogger(__name__)

_boto_config = BotoConfig(
    region_name=AWS_REGION,
    retries={"max_attempts": 3, "mode": "standard"},
    connect_timeout=10,
    read_timeout=30,
)

aws_clients: Dict[str, Any] = {}


def _build_client(service_name: str, *, endpoint_url: str | None = None) -> Any:
    """Return a boto3 client for ``service_name`` using the default credential chain."""

    return boto3.client(service_name, endpoint_url=endpoint_url, config=_boto_config)


def get_dynamodb_client() -> Any:
    """Return the cached DynamoDB client, creating it on first use."""

    client = aws_clients.get("dynamodb")
    if client is None:
        client = _build_client("dynamodb", endpoint_url=DYNAMODB_ENDPOINT_URL)
        aws_clients["dynamodb"] = client
        logger.info(
            "Initialised DynamoDB client (region=%s, endpoint=%s)",
            AWS_REGION,
            DYNAMODB_ENDPOINT_URL or "default",
        )
    return client


def get_management_api_client(endpoint_url: str) -> Any:
    """Return the API Gateway Management client bound to ``endpoint_url``.

    Every WebSocket API stage has its own callback endpoint, so clients are
    cached per endpoint.
    """

    key = f"apigatewaymanagementapi:{endpoint_url}"
    client = aws_clients.get(key)
    if client is None:
        client = _build_client("apigatewaymanagementapi", endpoint_url=endpoint_url)
        aws_clients[key] = client
        logger.info("Initialised API Gateway Management client for %s", endpoint_url)
    return client


__all__ = ["aws_clients", "get_dynamodb_client", "get_management_api_client"]

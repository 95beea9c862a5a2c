"""AWS Lambda entry point for the API Gateway WebSocket routes.

Wire ``$connect``, ``$disconnect`` and ``post`` to ``lambda_function.handler``.
The function needs ``TABLE_NAME`` plus DynamoDB read/write access and
``execute-api:ManageConnections`` on the API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from core.logging import setup_logging
from core.utils.env import get_env
from features.broadcast.dependencies import gateway_channel_factory
from features.broadcast.handler import LifecycleHandler
from infrastructure.aws.connection_store import DynamoConnectionRegistry

setup_logging()

logger = logging.getLogger(__name__)

# Reused across invocations of a warm container
_lifecycle_handler: Optional[LifecycleHandler] = None


def get_lifecycle_handler() -> LifecycleHandler:
    """Return the process-wide handler, building it on first use."""
    global _lifecycle_handler
    if _lifecycle_handler is None:
        registry = DynamoConnectionRegistry(table_name=get_env("TABLE_NAME", required=True))
        _lifecycle_handler = LifecycleHandler(registry, gateway_channel_factory)
        logger.info("Lifecycle handler initialised (table=%s)", registry.table_name)
    return _lifecycle_handler


def handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Handle one WebSocket route invocation and return the proxy response."""

    logger.info("Invocation %s", getattr(context, "aws_request_id", None) or "<local>")

    response = asyncio.run(get_lifecycle_handler().handle_raw(event))
    return response.to_lambda()


__all__ = ["get_lifecycle_handler", "handler"]

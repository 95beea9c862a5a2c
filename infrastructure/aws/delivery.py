"""Push payloads to WebSocket clients through the API Gateway Management API.

``post_to_connection`` is blocking, so every send runs on a worker of a
dedicated pool, never on asyncio's default executor. A hung send holds one
worker and does not delay sends to other connections.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from config.broadcast import DELIVERY_MAX_WORKERS, GONE_ERROR_CODES, GONE_STATUS_CODE
from core.connections import DeliveryOutcome

from .clients import get_management_api_client

logger = logging.getLogger(__name__)

_delivery_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def get_delivery_executor() -> ThreadPoolExecutor:
    """Return the process-wide delivery pool, creating it on first use."""

    global _delivery_executor
    if _delivery_executor is None:
        with _executor_lock:
            if _delivery_executor is None:
                # workers are spawned on demand, so the cap costs nothing until used
                _delivery_executor = ThreadPoolExecutor(
                    max_workers=DELIVERY_MAX_WORKERS, thread_name_prefix="apigw_delivery"
                )
    return _delivery_executor


def is_gone_error(exc: ClientError) -> bool:
    """True when the gateway reports the connection as permanently closed."""

    error = exc.response.get("Error", {})
    if error.get("Code") in GONE_ERROR_CODES:
        return True
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return status == GONE_STATUS_CODE


class ApiGatewayDeliveryChannel:
    """Send one payload to one connection via ``post_to_connection``."""

    def __init__(
        self,
        *,
        endpoint_url: str | None = None,
        client: Any | None = None,
        executor: Executor | None = None,
    ) -> None:
        if client is None:
            if not endpoint_url:
                raise ValueError("endpoint_url is required when no client is supplied")
            client = get_management_api_client(endpoint_url)
        self._client = client
        self._executor = executor

    async def send(self, connection_id: str, payload: str) -> DeliveryOutcome:
        logger.debug("Sending data to connection %s", connection_id)
        loop = asyncio.get_running_loop()
        call = functools.partial(
            self._client.post_to_connection,
            ConnectionId=connection_id,
            Data=payload.encode("utf-8"),
        )
        try:
            await loop.run_in_executor(self._executor or get_delivery_executor(), call)
        except ClientError as exc:
            if is_gone_error(exc):
                logger.info("Found stale connection %s", connection_id)
                return DeliveryOutcome.GONE_STALE
            logger.warning("Error posting to connection %s: %s", connection_id, exc)
            return DeliveryOutcome.TRANSIENT_FAILURE
        except BotoCoreError as exc:
            logger.warning("Error posting to connection %s: %s", connection_id, exc)
            return DeliveryOutcome.TRANSIENT_FAILURE

        logger.debug("Successfully sent data to connection %s", connection_id)
        return DeliveryOutcome.DELIVERED


__all__ = ["ApiGatewayDeliveryChannel", "get_delivery_executor", "is_gone_error"]

"""DynamoDB-backed connection registry.

Each live connection is one item ``{"connectionId": S, "ttl": N}``. The
``ttl`` attribute holds the expiry in epoch seconds and can be enabled as the
table's TTL attribute so DynamoDB evicts connections that never sent a
disconnect.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from config.aws import TABLE_NAME
from core.connections import ConnectionRecord
from core.exceptions import ConfigurationError, StoreUnavailableError

from .clients import get_dynamodb_client

logger = logging.getLogger(__name__)

_KEY_ATTRIBUTE = "connectionId"
_TTL_ATTRIBUTE = "ttl"


class DynamoConnectionRegistry:
    """Store connection records in a DynamoDB table."""

    def __init__(
        self,
        *,
        table_name: str | None = None,
        dynamodb_client: Any | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        resolved_table = table_name or TABLE_NAME
        if not resolved_table:
            raise ConfigurationError("TABLE_NAME must be configured", key="TABLE_NAME")

        self._table_name = resolved_table
        self._client = dynamodb_client or get_dynamodb_client()
        self._clock = clock

        logger.debug("DynamoConnectionRegistry initialised", extra={"table": self._table_name})

    @property
    def table_name(self) -> str:
        return self._table_name

    async def upsert(self, connection_id: str, ttl_seconds: int) -> ConnectionRecord:
        """Write (or overwrite) the item for ``connection_id``."""

        record = ConnectionRecord.from_ttl(connection_id, ttl_seconds, now=self._clock())
        params = {
            "TableName": self._table_name,
            "Item": {
                _KEY_ATTRIBUTE: {"S": record.connection_id},
                _TTL_ATTRIBUTE: {"N": str(record.expires_at)},
            },
        }
        logger.debug("DynamoDB put_item table=%s connection=%s ttl=%s", self._table_name, connection_id, record.expires_at)

        try:
            await asyncio.to_thread(self._client.put_item, **params)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to store connection %s: %s", connection_id, exc)
            raise StoreUnavailableError(
                "Failed to store connection", operation="put_item", original_error=exc
            ) from exc
        return record

    async def remove(self, connection_id: str) -> None:
        """Delete the item; DynamoDB treats a missing key as success."""

        params = {
            "TableName": self._table_name,
            "Key": {_KEY_ATTRIBUTE: {"S": connection_id}},
        }
        logger.debug("DynamoDB delete_item table=%s connection=%s", self._table_name, connection_id)

        try:
            await asyncio.to_thread(self._client.delete_item, **params)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to delete connection %s: %s", connection_id, exc)
            raise StoreUnavailableError(
                "Failed to delete connection", operation="delete_item", original_error=exc
            ) from exc

    async def list_all(self) -> List[str]:
        """Scan every page of the table; any page failure fails the whole read."""

        connection_ids: List[str] = []
        params: Dict[str, Any] = {
            "TableName": self._table_name,
            "ProjectionExpression": _KEY_ATTRIBUTE,
        }
        pages = 0

        while True:
            try:
                response = await asyncio.to_thread(self._client.scan, **params)
            except (BotoCoreError, ClientError) as exc:
                logger.error("Failed to scan connections from %s: %s", self._table_name, exc)
                raise StoreUnavailableError(
                    "Failed to read connections", operation="scan", original_error=exc
                ) from exc

            pages += 1
            for item in response.get("Items", []):
                value = item.get(_KEY_ATTRIBUTE, {}).get("S")
                if value:
                    connection_ids.append(value)

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key

        logger.debug(
            "Fetched %d connection id(s) from %s in %d page(s)",
            len(connection_ids),
            self._table_name,
            pages,
        )
        return connection_ids


__all__ = ["DynamoConnectionRegistry"]

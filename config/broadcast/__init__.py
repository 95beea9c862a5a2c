"""Broadcast configuration package."""

from .defaults import (
    CONNECTION_TTL_SECONDS,
    DEFAULT_ROUTE_KEY,
    DELIVERY_MAX_WORKERS,
    GONE_ERROR_CODES,
    GONE_STATUS_CODE,
    PAYLOAD_PREVIEW_LIMIT,
    ROUTE_CONNECT,
    ROUTE_DISCONNECT,
    ROUTE_POST,
)

__all__ = [
    "CONNECTION_TTL_SECONDS",
    "DEFAULT_ROUTE_KEY",
    "DELIVERY_MAX_WORKERS",
    "GONE_ERROR_CODES",
    "GONE_STATUS_CODE",
    "PAYLOAD_PREVIEW_LIMIT",
    "ROUTE_CONNECT",
    "ROUTE_DISCONNECT",
    "ROUTE_POST",
]

"""Observability helpers for request and event logging."""

from .request_logging import (
    log_websocket_request,
    register_http_request_logging,
    render_payload_preview,
)

__all__ = [
    "log_websocket_request",
    "register_http_request_logging",
    "render_payload_preview",
]

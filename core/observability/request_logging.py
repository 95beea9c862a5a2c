"""Request logging helpers for HTTP, WebSocket and gateway event traffic."""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from fastapi import FastAPI, Request, WebSocket

from config.broadcast import PAYLOAD_PREVIEW_LIMIT

# Header and payload keys whose values never reach the logs in full
_SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "password",
    "secret",
    "sec-websocket-key",
    "token",
    "x-api-key",
}
_TOKEN_PREVIEW_LENGTH = 12


def _redact_token(token_value: str) -> str:
    """Return a preview of sensitive tokens while hiding the rest."""

    if len(token_value) <= _TOKEN_PREVIEW_LENGTH:
        return "***"
    return f"{token_value[:_TOKEN_PREVIEW_LENGTH]}***"


def _format_client_address(client: tuple[str, int] | None) -> str:
    if not client:
        return "unknown"
    host, port = client
    return f"{host}:{port}" if port is not None else host


def _format_body_preview(body: bytes) -> str:
    if not body:
        return "<empty>"

    is_truncated = len(body) > PAYLOAD_PREVIEW_LIMIT
    snippet = body[:PAYLOAD_PREVIEW_LIMIT]

    try:
        text = snippet.decode("utf-8")
    except UnicodeDecodeError:
        return f"<binary {len(body)} bytes>"

    text = " ".join(text.split())
    if is_truncated:
        return f"{text}... ({len(body)} bytes)"
    return text


def _redact_payload(value: Any, *, depth: int = 8) -> Any:
    if depth <= 0:
        return "<max depth reached>"

    if isinstance(value, Mapping):
        redacted: dict[Any, Any] = {}
        for key, item in value.items():
            if str(key).lower() in _SENSITIVE_KEYS:
                redacted[key] = _redact_token(str(item)) if item else "***"
            else:
                redacted[key] = _redact_payload(item, depth=depth - 1)
        return redacted

    if isinstance(value, (list, tuple)):
        return [_redact_payload(item, depth=depth - 1) for item in value]

    return value


def render_payload_preview(payload: Any) -> str:
    """Return a redacted, length-limited preview for debug logging."""

    if payload is None:
        return "<none>"

    if isinstance(payload, (bytes, bytearray)):
        return _format_body_preview(bytes(payload))

    if isinstance(payload, str):
        return _format_body_preview(payload.encode("utf-8", errors="ignore"))

    try:
        serialized = json.dumps(
            _redact_payload(payload),
            default=repr,
            ensure_ascii=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError):
        serialized = repr(payload)

    return _format_body_preview(serialized.encode("utf-8", errors="ignore"))


def register_http_request_logging(app: FastAPI, *, logger_name: str = "core.http") -> None:
    """Attach middleware that logs every HTTP request."""

    if getattr(app.state, "_http_request_logging_installed", False):  # pragma: no cover - idempotence
        return

    logger = logging.getLogger(logger_name)

    @app.middleware("http")
    async def _log_request(request: Request, call_next):  # type: ignore[override]
        client = request.client
        client_addr = _format_client_address((client.host, client.port) if client else None)
        logger.info("HTTP %s %s from %s", request.method, request.url.path, client_addr)
        return await call_next(request)

    app.state._http_request_logging_installed = True


def log_websocket_request(
    websocket: WebSocket,
    *,
    logger: logging.Logger | None = None,
    label: str | None = None,
) -> None:
    """Log metadata about an inbound WebSocket request."""

    log = logger or logging.getLogger("core.websocket")
    name = label or "WebSocket"
    client = websocket.client
    client_addr = _format_client_address((client.host, client.port) if client else None)
    log.info("%s connection requested for %s from %s", name, websocket.url.path, client_addr)

    headers = _redact_payload(dict(websocket.headers.items()))
    if headers:
        log.debug("%s request headers: %s", name, headers)


__all__ = ["log_websocket_request", "register_http_request_logging", "render_payload_preview"]

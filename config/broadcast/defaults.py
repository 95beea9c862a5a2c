"""Fixed broadcast protocol values."""

from __future__ import annotations

# Lifetime written to the store on every connect (seconds)
CONNECTION_TTL_SECONDS = 3600

# Gateway route keys
ROUTE_CONNECT = "$connect"
ROUTE_DISCONNECT = "$disconnect"
ROUTE_POST = "post"
DEFAULT_ROUTE_KEY = "$default"

# Delivery channel signals meaning "this connection will never come back"
GONE_STATUS_CODE = 410
GONE_ERROR_CODES = frozenset({"GoneException"})

# Upper bound on concurrent post_to_connection calls per process
DELIVERY_MAX_WORKERS = 256

# Max characters of a raw event rendered into debug logs
PAYLOAD_PREVIEW_LIMIT = 4096

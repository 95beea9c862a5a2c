"""Centralised logging configuration for the broadcast backend."""
from __future__ import annotations

import logging
import logging.config
from typing import Dict

from core.utils.env import get_env, get_flag, is_lambda_runtime

_PATH_TRIM_PREFIXES = ("/var/task/", "/app/")
_ORIGINAL_LOG_RECORD_FACTORY = logging.getLogRecordFactory()
_LOG_RECORD_FACTORY_CONFIGURED = False

_LOGGING_CONFIGURED = False

_QUIET_LOGGERS = (
    # AWS SDKs
    "botocore",
    "botocore.credentials",
    "botocore.httpsession",
    "botocore.hooks",
    "botocore.parsers",
    "botocore.retryhandler",
    "boto3",
    "urllib3",
    "urllib3.connectionpool",
    # HTTP clients used by the test client
    "httpcore",
    "httpx",
    "h11",
    # WebSocket protocol chatter
    "websockets",
    "websockets.server",
    "websockets.protocol",
)


class _NoPingPongFilter(logging.Filter):
    """Filter websocket keepalive ping/pong chatter."""

    _BLACKLIST = (
        "% sending keepalive ping",
        "> PING",
        "< PONG",
        "keepalive pong",
    )

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - behaviourally trivial
        message = record.getMessage()
        return not any(token in message for token in self._BLACKLIST)


def _resolve_level(value: str | None, default: str) -> str:
    value = (value or "").strip().upper()
    if value and getattr(logging, value, None) is not None:
        return value
    return default


def _install_log_record_factory() -> None:
    """Install a log record factory that exposes trimmed paths."""

    global _LOG_RECORD_FACTORY_CONFIGURED
    if _LOG_RECORD_FACTORY_CONFIGURED:
        return

    def factory(*args, **kwargs):
        record = _ORIGINAL_LOG_RECORD_FACTORY(*args, **kwargs)
        pathname = getattr(record, "pathname", "") or ""
        for prefix in _PATH_TRIM_PREFIXES:
            if pathname.startswith(prefix):
                record.shortpathname = pathname[len(prefix):]
                break
        else:
            record.shortpathname = pathname
        return record

    logging.setLogRecordFactory(factory)
    _LOG_RECORD_FACTORY_CONFIGURED = True


def _build_format() -> str:
    location_fmt = "%(shortpathname)s:%(lineno)d"
    # CloudWatch stamps every line itself
    if is_lambda_runtime():
        return "%(levelname)s [{location}] - %(message)s".format(location=location_fmt)
    if get_flag("BACKEND_LOG_TIME_MS"):
        return "%(asctime)s.%(msecs)03d %(levelname)s [{location}] - %(message)s".format(
            location=location_fmt
        )
    return "%(asctime)s %(levelname)s [{location}] - %(message)s".format(location=location_fmt)


def setup_logging(force: bool = False) -> None:
    """Configure root/application loggers for console output."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED and not force:
        return

    log_level = _resolve_level(get_env("BACKEND_LOG_LEVEL", default="INFO"), "INFO")
    access_level = _resolve_level(get_env("BACKEND_ACCESS_LOG_LEVEL"), "WARNING")

    config: Dict[str, object] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": _build_format(),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console"],
        },
        "loggers": {
            "uvicorn": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn.error": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": access_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    _install_log_record_factory()

    # The Lambda runtime pre-installs a handler on the root logger
    if is_lambda_runtime():
        for handler in list(logging.getLogger().handlers):
            logging.getLogger().removeHandler(handler)

    logging.config.dictConfig(config)
    logging.captureWarnings(True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("uvicorn.error").addFilter(_NoPingPongFilter())

    _LOGGING_CONFIGURED = True


__all__ = ["setup_logging"]

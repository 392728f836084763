"""
ditup_api.observability.logging

Structured logging for the ditup API.

Responsibilities:
- Route stdlib and `structlog` output to stdout as one JSON object per line.
- Stamp every event with the service name.
- Keep credentials out of the logs: passwords, account codes and auth headers
  are replaced before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Event keys whose values are never written to the log.
SECRET_KEYS = frozenset(
    {"password", "code", "email_verification_code", "emailVerificationCode", "authorization"}
)
_REDACTED = "[redacted]"

# Chatty third-party loggers that only matter when debugging them.
_QUIET = ("aiosqlite", "sqlalchemy.engine", "httpx")


def configure_logging(*, service_name: str, level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in _QUIET:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _service(service_name),
            _redact_secrets,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _service(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _redact_secrets(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = _REDACTED
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)

"""
hipp_admin.observability.logging

Structured logging setup.

Responsibilities:
- Configure `structlog` once per process: JSON lines for deployments, console
  rendering for local development.
- Redact credential-bearing fields before anything is rendered.
- Keep chatty third-party loggers (SQL echo, uvicorn access) out of the way.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Event keys that must never reach log output verbatim.
SENSITIVE_KEYS = frozenset(
    {"password", "current_password", "new_password", "token", "authorization", "secret"}
)

_QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "aiosqlite")


def configure_logging(*, service_name: str, level: str, json: bool = True) -> None:
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _service_stamp(service_name),
            _redact_sensitive,
            structlog.processors.dict_tracebacks if json else structlog.dev.set_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _service_stamp(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _redact_sensitive(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Request-scoped metadata (request id, path, method) is bound via contextvars in
# `observability.middleware`; services add user/role ids per event.

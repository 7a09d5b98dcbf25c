"""
Logging for the AppVault engine.

Every engine transaction binds two context fields that are stamped onto
each record emitted while it runs:
- actor_id: the signed-in user at the start of the operation ("-" if none)
- operation: the engine operation name, e.g. "login" or "resolve_bug"

Development output is one line per record; production output is JSON.

Usage:
    from appvault.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Points granted", extra={"user_id": user.id, "amount": 1})
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

actor_id_var: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)
operation_var: ContextVar[Optional[str]] = ContextVar("operation", default=None)

CONTEXT_FIELDS = ("actor_id", "operation")

# LogRecord attributes that are not caller-supplied extras
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", *CONTEXT_FIELDS}

_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "httpx", "httpcore", "openai")


@contextmanager
def bind_operation(operation: str, actor_id: Optional[str] = None) -> Iterator[None]:
    """Scope log context to one engine operation."""
    op_token = operation_var.set(operation)
    actor_token = actor_id_var.set(actor_id)
    try:
        yield
    finally:
        actor_id_var.reset(actor_token)
        operation_var.reset(op_token)


class OperationContextFilter(logging.Filter):
    """Copies the bound operation context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.actor_id = actor_id_var.get() or "-"  # type: ignore[attr-defined]
        record.operation = operation_var.get() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; context fields only when bound."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, "-")
            if value != "-":
                payload[field] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extras = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and v is not None}
        payload.update(json.loads(json.dumps(extras, default=str)))
        return json.dumps(payload)


def _dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] actor=%(actor_id)s op=%(operation)s %(message)s",
        datefmt="%H:%M:%S",
    )


class _EngineHandler(logging.StreamHandler):
    """Marker type so reconfiguring replaces only handlers installed here."""


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install the engine handler on the root logger.

    Safe to call repeatedly: a previous engine handler is replaced, handlers
    installed by anything else are left alone.
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in [h for h in root.handlers if isinstance(h, _EngineHandler)]:
        root.removeHandler(existing)

    handler = _EngineHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(OperationContextFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else _dev_formatter())
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

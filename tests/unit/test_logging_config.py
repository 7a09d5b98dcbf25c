"""Unit tests for engine logging."""

import json
import logging

import pytest

from appvault.logging_config import (
    JsonFormatter,
    OperationContextFilter,
    bind_operation,
    configure_logging,
)


def _record(msg="Points earned", **extra) -> logging.LogRecord:
    record = logging.makeLogRecord({"name": "appvault.test", "levelname": "INFO", "msg": msg, **extra})
    OperationContextFilter().filter(record)
    return record


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonFormatter:
    """Production output."""

    def test_bound_operation_is_stamped(self):
        with bind_operation("login", "u1"):
            record = _record()
        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "Points earned"
        assert payload["actor_id"] == "u1"
        assert payload["operation"] == "login"

    def test_unbound_context_is_omitted(self):
        payload = json.loads(JsonFormatter().format(_record()))
        assert "actor_id" not in payload
        assert "operation" not in payload

    def test_extras_are_serialised(self):
        payload = json.loads(JsonFormatter().format(_record(user_id="u2", amount=1, when=object())))
        assert payload["user_id"] == "u2"
        assert payload["amount"] == 1
        assert isinstance(payload["when"], str)

    def test_context_resets_after_operation(self):
        with bind_operation("logout", "u2"):
            pass
        record = _record()
        assert record.actor_id == "-"
        assert record.operation == "-"


class TestConfigureLogging:
    """Handler installation on the root logger."""

    def test_reconfigure_replaces_only_engine_handler(self, restore_root):
        foreign = logging.NullHandler()
        restore_root.addHandler(foreign)

        configure_logging(log_level="INFO")
        configure_logging(log_level="DEBUG", environment="production")

        assert foreign in restore_root.handlers
        engine_handlers = [h for h in restore_root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(engine_handlers) == 1
        assert restore_root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

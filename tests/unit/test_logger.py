"""Logging processors and request-scoped context."""

import structlog

from clrag import __version__
from clrag.observability.logger import add_app_context, request_context, setup_logging_from_config


def test_app_context_is_stamped():
    event = add_app_context(None, "info", {"event": "x"})
    assert event["app"] == "clrag"
    assert event["version"] == __version__


def test_request_context_binds_and_unbinds():
    with request_context(request_id="req_1"):
        assert structlog.contextvars.get_contextvars()["request_id"] == "req_1"
    assert "request_id" not in structlog.contextvars.get_contextvars()


def test_log_file_from_config(tmp_path):
    log_file = tmp_path / "logs" / "clrag.log"
    setup_logging_from_config({"logging": {"level": "INFO", "format": "json", "file": str(log_file)}})
    assert log_file.parent.exists()
    setup_logging_from_config({"logging": {"level": "INFO", "format": "json"}})

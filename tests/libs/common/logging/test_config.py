"""Tests for logging configuration."""

import json
import logging
from collections.abc import Iterator

import pytest

from libs.common.logging.config import TraceIDFilter, configure_logging
from libs.common.logging.context import reset_trace_id, set_trace_id
from libs.common.logging.formatter import JSONFormatter


@pytest.fixture()
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    def test_installs_single_json_handler(self) -> None:
        configure_logging(service_name="secrets_api", log_level="debug")
        configure_logging(service_name="secrets_api", log_level="debug")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert any(isinstance(f, TraceIDFilter) for f in root.handlers[0].filters)

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(service_name="secrets_api", log_level="LOUD")

    def test_output_carries_trace_id(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(service_name="secrets_api")
        token = set_trace_id("trace-xyz")
        try:
            logging.getLogger("tests").info("hello", extra={"secret_name": "db-creds"})
        finally:
            reset_trace_id(token)

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["trace_id"] == "trace-xyz"
        assert entry["message"] == "hello"
        assert entry["context"] == {"secret_name": "db-creds"}

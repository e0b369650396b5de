"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from cdpgen.config.logging import HANDLER_NAME, configure_logging, run_context


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    cdp = logging.getLogger("cdpgen")
    cdp_level = cdp.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    cdp.setLevel(cdp_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("cdpgen").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("cdpgen").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("cdpgen.test")
        log.warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "cdpgen.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("cdpgen.infrastructure.sources").debug("Loaded protocol.json")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Loaded protocol.json"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "cdpgen.infrastructure.sources"

    def test_http_client_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("httpx").debug("HTTP Request: GET")
        logging.getLogger("httpcore").debug("connect_tcp.started")

        assert capfd.readouterr().err == ""

    def test_quiet_raises_threshold(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger("cdpgen").level == logging.ERROR

    def test_verbose_beats_quiet(self) -> None:
        configure_logging(verbose=True, quiet=True)
        assert logging.getLogger("cdpgen").level == logging.DEBUG

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        ours = [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]
        assert len(ours) == 1

    def test_foreign_handlers_survive(self) -> None:
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)
        configure_logging()
        configure_logging(log_json=True)
        assert foreign in logging.getLogger().handlers


class TestRunContext:
    def test_fields_reach_stdlib_records(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        with run_context(source="browser_protocol.json"):
            logging.getLogger("cdpgen.services.base").warning("Parsing")
        logging.getLogger("cdpgen.services.base").warning("Done")

        first, second = (json.loads(line) for line in capfd.readouterr().err.splitlines())
        assert first["source"] == "browser_protocol.json"
        assert "source" not in second

    def test_nested_contexts_merge(self) -> None:
        with run_context(op="generate"), run_context(source="a.json"):
            assert structlog.contextvars.get_contextvars() == {
                "op": "generate",
                "source": "a.json",
            }
        assert structlog.contextvars.get_contextvars() == {}

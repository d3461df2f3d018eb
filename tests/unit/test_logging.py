"""
Unit Tests - Logging Configuration
"""
import json
import logging
from decimal import Decimal

import pytest
import structlog

from src.config import get_settings
from src.config.logging import bind_run_context, configure_logging, render_money


@pytest.fixture
def json_logging(capsys):
    """Configure JSON logging for one test, then restore the previous setup"""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level

    configure_logging("INFO", "json")
    yield lambda: [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]

    root_logger.handlers = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestRunContext:
    """Tests for bind_run_context"""

    def test_binds_and_unbinds(self):
        with bind_run_context("process", report_path="out.json") as run_id:
            bound = structlog.contextvars.get_contextvars()
            assert bound == {"run_id": run_id, "step": "process", "report_path": "out.json"}

        assert "run_id" not in structlog.contextvars.get_contextvars()

    def test_explicit_run_id(self):
        with bind_run_context("extract", run_id="flow-123") as run_id:
            assert run_id == "flow-123"

    def test_generated_ids_differ(self):
        with bind_run_context("process") as first:
            pass
        with bind_run_context("process") as second:
            pass
        assert first != second


class TestProcessors:
    """Tests for the domain log processors"""

    def test_render_money(self):
        event = render_money(None, "info", {"event": "Report built", "total_revenue": Decimal("650.00"), "orders": 5})
        assert event == {"event": "Report built", "total_revenue": "650.00", "orders": 5}


class TestConfigureLogging:
    """Tests for configure_logging"""

    def test_json_entries_carry_service_and_run(self, json_logging):
        with bind_run_context("process", run_id="run-1"):
            structlog.get_logger("src.tests").info("Sales report built", total_revenue=Decimal("329.50"))

        entry = next(e for e in json_logging() if e["event"] == "Sales report built")

        assert entry["total_revenue"] == "329.50"
        assert entry["run_id"] == "run-1"
        assert entry["step"] == "process"
        assert entry["service"] == get_settings().app_name
        assert entry["level"] == "info"

    def test_http_client_quiet_unless_debug(self, json_logging):
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging("DEBUG", "json")
        assert logging.getLogger("httpx").level == logging.DEBUG

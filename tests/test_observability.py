"""
Tests for logging formatters and derivation context.
"""

import json
import logging

from projectdesk.attention import engine
from projectdesk.observability import (
    DerivationContext,
    HumanFormatter,
    JSONFormatter,
    configure_logging,
    get_logger,
    get_project_id,
)


def make_record(msg="Derived", level=logging.INFO, **extra):
    record = logging.LogRecord("projectdesk.test", level, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestDerivationContext:
    def test_sets_and_resets(self):
        assert get_project_id() is None
        with DerivationContext(project_id="proj-1") as ctx:
            assert ctx.project_id == "proj-1"
            assert get_project_id() == "proj-1"
        assert get_project_id() is None

    def test_nesting_restores_outer(self):
        with DerivationContext(project_id="outer"):
            with DerivationContext(project_id="inner"):
                assert get_project_id() == "inner"
            assert get_project_id() == "outer"


class TestJSONFormatter:
    def test_core_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "projectdesk.test"
        assert data["message"] == "Derived"
        assert data["timestamp"].endswith("Z")
        assert "project_id" not in data

    def test_extra_fields_and_context(self):
        with DerivationContext(project_id="proj-9"):
            data = json.loads(JSONFormatter().format(make_record(rule="quote_stale", items=3)))
        assert data["project_id"] == "proj-9"
        assert data["rule"] == "quote_stale"
        assert data["items"] == 3


class TestHumanFormatter:
    def test_includes_project(self):
        with DerivationContext(project_id="proj-2"):
            line = HumanFormatter().format(make_record(level=logging.WARNING, msg="Attention rule x failed"))
        assert "[WARNING]" in line
        assert "[proj-2]" in line
        assert line.endswith("Attention rule x failed")


class TestConfigureLogging:
    def test_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(level="DEBUG", json_format=True)
            configure_logging(level="DEBUG", json_format=True)
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert root.level == logging.DEBUG
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestGetLogger:
    def test_module_loggers_share_namespace(self):
        assert get_logger("projectdesk.attention.engine") is engine.logger
        assert engine.logger.name == "projectdesk.attention.engine"

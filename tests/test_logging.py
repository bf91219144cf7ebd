"""
Tests for the logging module.

Tests verify:
- JSON output uses ECS field names
- Bound context is merged into events
- DEBUG logs are suppressed at INFO level
"""

import json

from pagekit.builder import SiteBuilder
from pagekit.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


def _json_lines(text):
    return [json.loads(line) for line in text.splitlines() if line.strip().startswith("{")]


class TestConfigureLogging:
    def test_json_format(self, capsys):
        configure_logging(level="INFO", json_format=True)

        get_logger("test").info("page_rendered", size=42)

        events = _json_lines(capsys.readouterr().err)
        assert events[-1]["event"] == "page_rendered"
        assert events[-1]["size"] == 42
        assert events[-1]["log.level"] == "info"
        assert events[-1]["service.name"] == "pagekit"
        assert events[-1]["log.logger"] == "test"
        assert "@timestamp" in events[-1]

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)

        get_logger("test").debug("noisy")

        assert _json_lines(capsys.readouterr().err) == []

    def test_module_logger_follows_later_configuration(self, capsys, site_config, source_dir):
        configure_logging(level="INFO", json_format=True)

        SiteBuilder(site_config).build_page(source_dir / "python.md")

        events = _json_lines(capsys.readouterr().err)
        rendered = [e for e in events if e["event"] == "page_rendered"]
        assert rendered[-1]["log.logger"] == "pagekit.builder"
        assert rendered[-1]["page"].endswith("python.md")

    def test_console_format(self, capsys):
        configure_logging(level="INFO", json_format=False)

        get_logger("test").warning("page_failed", page="a.md")

        err = capsys.readouterr().err
        assert "page_failed" in err
        assert "a.md" in err


class TestContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_bind_context(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(page="content/python.md")

        get_logger("test").info("page_rendered")

        assert _json_lines(capsys.readouterr().err)[-1]["page"] == "content/python.md"

    def test_log_context_scopes_keys(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("test")

        with LogContext(page="a.md"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _json_lines(capsys.readouterr().err)[-2:]
        assert inside["page"] == "a.md"
        assert "page" not in outside

"""Tests for structured logging configuration."""

import logging

import pytest
import structlog

from crossref_client.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_root_level(self):
        configure_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self):
        configure_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_events_rendered_to_stderr(self, capsys):
        configure_logging("INFO")

        structlog.get_logger("crossref_client.test").info("cache_ready", entries=3)

        err = capsys.readouterr().err
        assert "cache_ready" in err
        assert "entries=3" in err

    def test_debug_filtered_at_info(self, capsys):
        configure_logging("INFO")

        structlog.get_logger("crossref_client.test").debug("noisy")

        assert "noisy" not in capsys.readouterr().err

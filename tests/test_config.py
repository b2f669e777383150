"""Tests for planbook/config.py and planbook/log.py."""

import logging

import pytest

from planbook.config import DEFAULT_SERVER_URL, Settings, load_settings, save_settings
from planbook.log import logger, setup_logging
from planbook.workspace import get_user_timezone


def test_defaults():
    s = Settings.from_dict({})
    assert s.server_url == DEFAULT_SERVER_URL
    assert s.drag_threshold == 5
    assert s.click_max_ms == 300
    assert s.edit_debounce_ms == 150
    assert s.autosave_minutes == 5.0


def test_load_from_workspace(workspace):
    s = load_settings(workspace)
    assert s.server_url == "http://testserver"
    assert s.log_level == "DEBUG"


def test_env_overrides(workspace, monkeypatch):
    monkeypatch.setenv("PLANBOOK_SERVER_URL", "http://10.0.0.5:9000/")
    monkeypatch.setenv("PLANBOOK_LOG_LEVEL", "warning")
    s = load_settings(workspace)
    assert s.server_url == "http://10.0.0.5:9000"
    assert s.log_level == "WARNING"


def test_save_round_trip(workspace):
    s = load_settings(workspace)
    s.autosave_minutes = 1.5
    save_settings(s, workspace)
    assert load_settings(workspace).autosave_minutes == 1.5


def test_bad_timezone_falls_back_to_utc(workspace):
    (workspace / "planner" / "config.yaml").write_text("timezone: Mars/Olympus\n", encoding="utf-8")
    assert get_user_timezone(workspace).key == "UTC"


@pytest.fixture
def restore_logger():
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_setup_logging_writes_context_file(workspace, restore_logger):
    setup_logging("test", "DEBUG", workspace)
    logging.getLogger("planbook.evening").info("hello from the store")
    for handler in logger.handlers:
        handler.flush()
    text = (workspace / "planner" / "logs" / "test.log").read_text(encoding="utf-8")
    assert "INFO [test] planbook.evening: hello from the store" in text


def test_tui_context_has_no_console_handler(workspace, restore_logger):
    setup_logging("tui", "INFO", workspace)
    assert not any(type(h) is logging.StreamHandler for h in logger.handlers)
    assert len(logger.handlers) == 1

import importlib
import logging
from logging.handlers import RotatingFileHandler

import pytest
from rich.logging import RichHandler

from assetpick import log_utils

pytestmark = [pytest.mark.unit]


@pytest.fixture(autouse=True)
def _restore_logger():
    log_utils._initialize_logger()
    yield
    if log_utils._file_handler is not None:
        log_utils.logger.removeHandler(log_utils._file_handler)
        log_utils._file_handler.close()
        log_utils._file_handler = None
    log_utils._initialize_logger()


def test_logger_has_single_rich_handler():
    handlers = log_utils.logger.handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert log_utils.logger.propagate is False
    assert log_utils.logger.level == logging.INFO


def test_env_var_sets_initial_level(monkeypatch):
    monkeypatch.setenv("ASSETPICK_LOG_LEVEL", "debug")
    log_utils._initialize_logger()
    assert log_utils.logger.level == logging.DEBUG


def test_invalid_env_var_defaults_to_info(monkeypatch):
    monkeypatch.setenv("ASSETPICK_LOG_LEVEL", "chatty")
    log_utils._initialize_logger()
    assert log_utils.logger.level == logging.INFO


def test_set_log_level_updates_handlers():
    log_utils.set_log_level("warning")
    assert log_utils.logger.level == logging.WARNING
    assert all(h.level == logging.WARNING for h in log_utils.logger.handlers)


def test_set_log_level_ignores_invalid_names():
    log_utils.set_log_level("loud")
    assert log_utils.logger.level == logging.INFO


def test_add_file_logging(tmp_path):
    log_dir = tmp_path / "logs"
    log_utils.add_file_logging(log_dir, "debug")

    file_handlers = [
        h for h in log_utils.logger.handlers if isinstance(h, RotatingFileHandler)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.DEBUG
    assert file_handlers[0].maxBytes == 10 * 1024 * 1024
    assert (log_dir / "assetpick.log").exists()


def test_add_file_logging_replaces_previous_handler(tmp_path):
    log_utils.add_file_logging(tmp_path / "one")
    log_utils.add_file_logging(tmp_path / "two", "nonsense")

    file_handlers = [
        h for h in log_utils.logger.handlers if isinstance(h, RotatingFileHandler)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.INFO
    assert file_handlers[0].baseFilename.endswith("two/assetpick.log")


def test_module_reload_keeps_one_console_handler():
    importlib.reload(log_utils)
    assert len(log_utils.logger.handlers) == 1

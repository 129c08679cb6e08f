# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `vkeys.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Enables the key trace only when VKEYS_KEYTRACE is set.

Every test writes its log files into a temporary directory.
"""

import logging

import pytest

from vkeys.utils import logging_config


@pytest.fixture(autouse=True)
def restore_root_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    logging_config.KEY_LOGGER.handlers = []
    logging_config.KEY_LOGGER.disabled = False


def test_setup_logging_creates_handlers(tmp_path, monkeypatch) -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.

    Assertions:
    - Exactly two handlers (vkeys.log + error.log) on the root logger.
    - Handler levels match the configuration.
    """
    monkeypatch.delenv(logging_config.KEYTRACE_ENV, raising=False)
    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
                "log_dir": str(tmp_path),
            }
        }
    )

    root = logging.getLogger()
    names = {type(h).__name__ for h in root.handlers}
    assert names == {"RotatingFileHandler"}
    assert len(root.handlers) == 2
    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert (tmp_path / "vkeys.log").exists()
    assert (tmp_path / "error.log").exists()


def test_console_handler_and_disabled_key_trace(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv(logging_config.KEYTRACE_ENV, raising=False)
    logging_config.setup_logging(
        {"logging": {"log_to_console": True, "console_level": "DEBUG", "log_dir": str(tmp_path)}}
    )

    root = logging.getLogger()
    stream_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(stream_handlers) == 1
    assert stream_handlers[0].level == logging.DEBUG
    assert logging_config.KEY_LOGGER.disabled
    assert not (tmp_path / "keytrace.log").exists()


def test_key_trace_enabled_by_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(logging_config.KEYTRACE_ENV, "yes")
    logging_config.setup_logging({"logging": {"log_to_console": False, "log_dir": str(tmp_path)}})

    assert not logging_config.KEY_LOGGER.disabled
    assert not logging_config.KEY_LOGGER.propagate
    logging_config.KEY_LOGGER.debug("key code=106")
    for handler in logging_config.KEY_LOGGER.handlers:
        handler.flush()
    assert "key code=106" in (tmp_path / "keytrace.log").read_text(encoding="utf-8")


def test_unusable_log_dir_falls_back_to_tempdir(tmp_path, monkeypatch, capsys) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    fallback = tmp_path / "fallback"
    fallback.mkdir()
    monkeypatch.setattr(logging_config.tempfile, "gettempdir", lambda: str(fallback))

    logging_config.setup_logging(
        {"logging": {"log_to_console": False, "log_dir": str(blocker / "logs")}}
    )

    assert (fallback / "vkeys.log").exists()
    assert "Error creating log directory" in capsys.readouterr().err

# vkeys/utils/logging_config.py
"""vkeys.utils.logging_config
============================

Logging setup for vkeys. Defines the global logger objects and
`setup_logging`, which attaches handlers to the root logger according to the
``[logging]`` section of the application configuration.

Features:
    - Rotating file log (vkeys.log) for general application events.
    - Optional console logging to stderr.
    - Optional separate error log (error.log) for ERROR and CRITICAL events.
    - Optional key trace (keytrace.log), enabled with the VKEYS_KEYTRACE
      environment variable, recording every decoded key code.
    - Log files go to the configured ``log_dir``; when it cannot be created
      the system temp directory is used.
    - Calling `setup_logging` again replaces the handlers instead of
      duplicating them.
    - Never raises; problems are reported on stderr.

Globals:
    logger: Main application logger ("vkeys").
    KEY_LOGGER: Logger for decoded key traces ("vkeys.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Unconfigured until setup_logging() attaches handlers.
logger = logging.getLogger("vkeys")
KEY_LOGGER = logging.getLogger("vkeys.keyevents")

KEYTRACE_ENV = "VKEYS_KEYTRACE"


def _resolve_log_dir(log_dir: Optional[str]) -> str:
    """Return a writable directory for log files."""
    if not log_dir:
        return os.getcwd()
    log_dir = os.path.expanduser(log_dir)
    try:
        os.makedirs(log_dir, exist_ok=True)
        return log_dir
    except OSError as e_mkdir:
        print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
        fallback = tempfile.gettempdir()
        print(f"Logging to temporary directory: '{fallback}'", file=sys.stderr)
        return fallback


def _rotating_handler(
    filename: str, max_bytes: int, backups: int, level: int, formatter: logging.Formatter
) -> Optional[logging.Handler]:
    try:
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
        )
    except Exception as e_fh:
        print(f"Error setting up log file '{filename}': {e_fh}.", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to three handlers go on the root logger:

    1. File handler: rotating vkeys.log from ``file_level`` (default DEBUG).
    2. Console handler: optional stderr output from ``console_level``
       (default WARNING).
    3. Error-file handler: optional rotating error.log, ERROR and above.

    The ``vkeys.keyevents`` logger does not propagate. It writes to
    keytrace.log when the environment variable ``VKEYS_KEYTRACE`` is
    ``1/true/yes`` and is disabled otherwise.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is read; recognised keys are
            ``file_level``, ``console_level``, ``log_to_console``,
            ``separate_error_log`` and ``log_dir``.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_dir = _resolve_log_dir(logging_config.get("log_dir"))

    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    log_filename = os.path.join(log_dir, "vkeys.log")
    file_handler = _rotating_handler(
        log_filename, 2 * 1024 * 1024, 5, log_file_level, file_formatter
    )

    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_file_handler = _rotating_handler(
            os.path.join(log_dir, "error.log"), 1024 * 1024, 3, logging.ERROR, file_formatter
        )

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(log_file_level)

    # Key trace
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(log_dir, "keytrace.log")
        key_trace_handler = _rotating_handler(
            key_trace_filename,
            1024 * 1024,
            3,
            logging.DEBUG,
            logging.Formatter("%(asctime)s - %(message)s"),
        )
        if key_trace_handler:
            KEY_LOGGER.addHandler(key_trace_handler)
            logging.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        else:
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )

# commentblocks/utils/logging_config.py
"""commentblocks.utils.logging_config
====================================

This module provides the logging configuration utility for commentblocks.
It defines global logger objects and a single setup function, `setup_logging`,
which configures application-wide logging handlers and log levels based on a
supplied configuration dictionary.

Features:
    - Rotating file logging for general application events (commentblocks.log).
    - Optional console logging to stderr with configurable log level.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional block-matching trace (trace.log) enabled via the
      COMMENTBLOCKS_TRACE environment variable.
    - Automatic creation of log directories, with fallback to the system temp directory on failure.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs when called multiple times.
    - Never raises exceptions; all errors are reported to stderr and logging continues with best-effort.

Usage:
    Call `setup_logging()` early in the application's startup sequence,
    optionally passing a configuration dictionary to customize log levels and handlers.

    >>> from commentblocks.utils import logging_config
    >>> logging_config.setup_logging({"logging": {"file_level": "INFO"}})

Globals:
    logger: Main application logger ("commentblocks").
    TRACE_LOGGER: Logger for per-block push/pop trace events ("commentblocks.trace").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import-time, unconfigured until ``setup_logging()`` attaches handlers.
logger = logging.getLogger("commentblocks")
TRACE_LOGGER = logging.getLogger("commentblocks.trace")

TRACE_ENV_VAR = "COMMENTBLOCKS_TRACE"


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    The routine sets up up to four independent handlers:

    1. File handler – rotating commentblocks.log capturing everything from
       the configured `file_level` (default DEBUG) upward.
    2. Console handler – optional `stderr` output whose threshold is
       `console_level` (default WARNING).
    3. Error-file handler – optional rotating error.log that stores
       only ERROR and CRITICAL events.
    4. Trace handler – optional rotating trace.log enabled when the
       environment variable ``COMMENTBLOCKS_TRACE`` is set to
       ``1/true/yes``; attached to the ``commentblocks.trace`` logger.

    Existing handlers on the root logger are cleared to avoid duplicate
    records when the function is invoked multiple times (e.g. in unit
    tests).

    Args:
        config (dict | None): Optional application configuration blob.
            Only the ``["logging"]`` sub-section is consulted; recognised
            keys are ``file_level``, ``console_level``, ``log_to_console``
            and ``separate_error_log``.

    Notes:
        The function never raises; all I/O or permission errors are
        reported to stderr and the logging subsystem continues with a
        best-effort configuration.
    """
    if config is None:
        config = {}
    log_filename = "commentblocks.log"
    logging_config = config.get("logging", {})
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    log_dir = os.path.dirname(log_filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(
                f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr
            )
            log_filename = os.path.join(tempfile.gettempdir(), "commentblocks.log")
            print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-20s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)

        console_formatter = logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(console_log_level)

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = "error.log"
        try:
            error_file_handler = logging.handlers.RotatingFileHandler(
                error_log_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except Exception as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )

    # Configure the root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates

    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    if error_file_handler:
        root_logger.addHandler(error_file_handler)

    root_logger.setLevel(log_file_level)

    # Block-matching trace logger
    trace_logger = logging.getLogger("commentblocks.trace")
    trace_logger.propagate = False
    trace_logger.setLevel(logging.DEBUG)
    trace_logger.handlers = []

    if os.environ.get(TRACE_ENV_VAR, "").lower() in {"1", "true", "yes"}:
        try:
            trace_filename = "trace.log"
            trace_handler = logging.handlers.RotatingFileHandler(
                trace_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            trace_logger.addHandler(trace_handler)
            trace_logger.disabled = False
            logging.info("Block trace enabled, logging to '%s'.", trace_filename)
        except Exception as e_trace:
            logging.error(f"Failed to set up block trace logging: {e_trace}", exc_info=True)
            trace_logger.disabled = True
    else:
        trace_logger.addHandler(logging.NullHandler())
        trace_logger.disabled = True
        logging.debug("Block trace is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")

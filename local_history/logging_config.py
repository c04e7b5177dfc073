"""
Logging configuration for local-history-mcp.

Everything goes to stderr: when running as an MCP server, stdout carries the
protocol stream and must not receive log lines.
"""

import logging
import sys
import warnings

PACKAGE_LOGGER = "local_history"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _stderr_handler(root: logging.Logger) -> logging.Handler:
    """Return the package's stderr handler, adding it if not already present."""
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "_local_history", False):
            return h
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    handler._local_history = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    return handler


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Send package log records to stderr at the given level.

    Safe to call repeatedly; the handler is only installed once.
    Returns the package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    handler = _stderr_handler(logger)
    handler.setLevel(level)
    # Don't duplicate through the root logger if the host configured one
    logger.propagate = False
    return logger


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")
    configure_logging(logging.DEBUG)
    logging.getLogger("mcp").setLevel(logging.DEBUG)

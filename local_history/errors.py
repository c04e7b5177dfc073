"""
Exception types and error logging for local-history-mcp.

Logs full stack traces for debugging while showing clean messages to users.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class UnsupportedPlatformError(RuntimeError):
    """The host OS has no known Local History location."""

    def __init__(self, system: str):
        super().__init__(f"Unsupported operating system: {system}")
        self.system = system


class HistoryNotFoundError(LookupError):
    """No history in the store matches the requested file."""

    def __init__(self, file_path: str):
        super().__init__(f"No local history found for: {file_path}")
        self.file_path = file_path


class EntryIndexError(LookupError):
    """A history exists but the requested entry index is out of range."""

    def __init__(self, index: int, count: int):
        if count:
            available = f"0-{count - 1}"
        else:
            available = "none"
        super().__init__(f"Invalid entry index {index}. Available indices: {available}")
        self.index = index
        self.count = count


def _error_log_path() -> Path:
    """Resolve error log path, respecting LOCAL_HISTORY_ERROR_LOG."""
    from .config import load_config
    return load_config().error_log_path


def log_exception(exc: Exception, context: str = "", log_path: Optional[Path] = None) -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)
        log_path: Destination file; defaults to the configured error log

    Returns:
        Path to the error log file
    """
    log_path = log_path or _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Can't write error log; don't crash over it
    return log_path

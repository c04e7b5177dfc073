"""
Runtime configuration for local-history-mcp.

Settings come from environment variables only. The Local History store
itself is always discovered from OS conventions (see ``locator``) and is not
configurable here.

Environment Variables:
    LOCAL_HISTORY_LOG_LEVEL  - Log level for the server (falls back to LOG_LEVEL)
    LOG_LEVEL                - Log level, if LOCAL_HISTORY_LOG_LEVEL is unset
    LOCAL_HISTORY_VERBOSE    - "1" forces DEBUG logging
    LOCAL_HISTORY_ERROR_LOG  - File receiving tracebacks of unexpected errors
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_LOG_LEVEL = "INFO"
TOOL_DIRNAME = ".local-history-mcp"
ERROR_LOG_FILENAME = "errors.log"

_LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def get_tool_directory() -> Path:
    """Per-user directory for files this tool writes about itself (error log)."""
    return Path.home() / TOOL_DIRNAME


@dataclass
class RuntimeConfig:
    """Process-wide settings for the CLI and MCP server."""
    log_level: str = DEFAULT_LOG_LEVEL
    verbose: bool = False
    error_log_path: Path = field(default_factory=lambda: get_tool_directory() / ERROR_LOG_FILENAME)

    @property
    def effective_level(self) -> int:
        """Numeric logging level, with verbose overriding the configured name."""
        if self.verbose:
            return logging.DEBUG
        return getattr(logging, self.log_level)


def _parse_level(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_LOG_LEVEL
    name = value.strip().upper()
    if name == "WARN":
        name = "WARNING"
    # pino-style names used by the editor tooling
    if name == "FATAL":
        name = "CRITICAL"
    if name == "TRACE":
        name = "DEBUG"
    return name if name in _LEVEL_NAMES else DEFAULT_LOG_LEVEL


def load_config(environ: Optional[Mapping[str, str]] = None) -> RuntimeConfig:
    """Build the runtime config from environment variables.

    Unknown log level names fall back to INFO rather than failing startup.
    """
    env = os.environ if environ is None else environ
    level = env.get("LOCAL_HISTORY_LOG_LEVEL") or env.get("LOG_LEVEL")
    error_log = env.get("LOCAL_HISTORY_ERROR_LOG")
    config = RuntimeConfig(
        log_level=_parse_level(level),
        verbose=env.get("LOCAL_HISTORY_VERBOSE") == "1",
    )
    if error_log:
        config.error_log_path = Path(error_log).expanduser()
    return config

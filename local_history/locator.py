"""
Discovery of the editor's Local History directory.

VS Code and Cursor both keep per-file snapshots under
``<user data>/User/History``. Cursor is preferred when both are installed.

Default locations:
  Windows: %APPDATA%/{Cursor,Code}/User/History
  macOS:   ~/Library/Application Support/{Cursor,Code}/User/History
  Linux:   ~/.config/{Cursor,Code}/User/History
"""

import logging
import os
import platform
from pathlib import Path
from typing import Optional

from .errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)

# Producer applications in preference order
PRODUCERS = ("Cursor", "Code")

HISTORY_SUBPATH = ("User", "History")


def _user_data_parent(system: str, home: Path, appdata: Optional[str]) -> Path:
    """Directory that holds each editor's user-data folder on this OS."""
    if system == "Windows":
        return Path(appdata) if appdata else home / "AppData" / "Roaming"
    if system == "Darwin":
        return home / "Library" / "Application Support"
    if system == "Linux":
        return home / ".config"
    raise UnsupportedPlatformError(system)


def candidate_directories(
    system: Optional[str] = None,
    home: Optional[Path] = None,
    appdata: Optional[str] = None,
) -> list[Path]:
    """History directory candidates for this OS, most preferred first.

    Raises:
        UnsupportedPlatformError: If the OS is not Windows, macOS or Linux.
    """
    system = system or platform.system()
    home = home if home is not None else Path.home()
    if appdata is None:
        appdata = os.environ.get("APPDATA")
    parent = _user_data_parent(system, home, appdata)
    return [parent.joinpath(producer, *HISTORY_SUBPATH) for producer in PRODUCERS]


def resolve_history_directory(
    system: Optional[str] = None,
    home: Optional[Path] = None,
    appdata: Optional[str] = None,
) -> Path:
    """
    Pick the Local History directory to read.

    The first candidate that exists wins. If none exists, the preferred
    (Cursor) location is returned anyway so callers report it as missing
    instead of silently reading some other editor's store.
    """
    candidates = candidate_directories(system, home, appdata)
    for candidate in candidates:
        if candidate.exists():
            logger.debug("Using history directory %s", candidate)
            return candidate
    logger.debug("No history directory found, defaulting to %s", candidates[0])
    return candidates[0]

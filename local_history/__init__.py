"""
Local History

Read-only access to the per-file snapshots VS Code and Cursor keep under
``User/History``, with lookup by path, full-text search and restore.

Quick Start:
    from local_history import LocalHistory

    lh = LocalHistory()   # finds the Cursor or VS Code store for this OS
    history = lh.find_history_by_file_path("/path/to/file.py")
    lh.restore_from_history("/path/to/file.py", 1)

CLI Usage:
    local-history list
    local-history search "needle" --case-sensitive
    local-history mcp        # MCP stdio server
"""

from .errors import EntryIndexError, HistoryNotFoundError, UnsupportedPlatformError
from .history import LocalHistory
from .paths import normalize_path, path_to_uri, uri_to_path
from .types import FileHistory, HistoryEntry, HistoryStats, RestoreResult, SearchMatch

__version__ = "1.0.0"
__all__ = [
    "LocalHistory",
    "FileHistory",
    "HistoryEntry",
    "HistoryStats",
    "SearchMatch",
    "RestoreResult",
    "uri_to_path",
    "path_to_uri",
    "normalize_path",
    "UnsupportedPlatformError",
    "HistoryNotFoundError",
    "EntryIndexError",
]

"""
Reader and index for the editor's Local History store.

Layout on disk (written by the editor, read-only here):

    History/
        <hash>/                 one directory per tracked file
            entries.json        {"resource": "file:///path/to/file", ...}
            AbCd.py             snapshot files, opaque names
            XyZw.py

Every query re-scans the directory. Nothing is cached, so the view is always
consistent with whatever the editor has written since the last call.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .errors import EntryIndexError, HistoryNotFoundError
from .locator import resolve_history_directory
from .paths import normalize_path
from .restore import restore_from_history as _restore
from .search import search_history_content as _search
from .types import FileHistory, HistoryEntry, HistoryStats, RestoreResult, SearchMatch

logger = logging.getLogger(__name__)

ENTRIES_FILENAME = "entries.json"


class LocalHistory:
    """
    Query interface over one Local History store.

    The store root is resolved once, at construction, and never changes for
    the lifetime of the instance. Create a new instance to pick up an editor
    installed after startup.

    Example:
        >>> lh = LocalHistory()
        >>> lh.history_directory_exists()
        True
        >>> history = lh.find_history_by_file_path("/home/me/project/app.py")
        >>> history.entries[0].timestamp   # most recent snapshot
        1751055000000
    """

    def __init__(self, history_dir: Optional[Path] = None):
        """
        Args:
            history_dir: Store root to read. Discovered from OS conventions
                when omitted.

        Raises:
            UnsupportedPlatformError: If discovery runs on an unknown OS.
        """
        if history_dir is None:
            history_dir = resolve_history_directory()
        self._history_dir = Path(history_dir)

    @property
    def history_dir(self) -> Path:
        """Root of the snapshot store."""
        return self._history_dir

    # -------------------------------------------------------------------------
    # Snapshot directory reader
    # -------------------------------------------------------------------------

    def history_directory_exists(self) -> bool:
        """Check if the store root exists. Never raises."""
        try:
            return self._history_dir.exists()
        except OSError:
            return False

    def get_history_directories(self) -> list[str]:
        """Names of the per-file snapshot directories.

        Returns an empty list if the store is missing or unreadable.
        """
        if not self.history_directory_exists():
            return []
        try:
            return [
                entry.name for entry in os.scandir(self._history_dir)
                if entry.is_dir()
            ]
        except OSError as e:
            logger.warning("Failed to read history directory %s: %s", self._history_dir, e)
            return []

    def _parse_entries_json(self, dir_path: Path) -> Optional[dict]:
        """Load a snapshot directory's metadata, or None if absent or invalid.

        The editor rewrites this file while saving, so a truncated or
        half-written file is expected now and then.
        """
        entries_path = dir_path / ENTRIES_FILENAME
        if not entries_path.exists():
            return None
        try:
            data = json.loads(entries_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to parse %s: %s", entries_path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Unexpected metadata in %s: not a JSON object", entries_path)
            return None
        return data

    def _read_entry(self, snapshot: Path) -> Optional[HistoryEntry]:
        try:
            mtime_ns = snapshot.stat().st_mtime_ns
            # Decode bytes directly: text mode would rewrite \r\n line endings
            content = snapshot.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read history file %s: %s", snapshot, e)
            return None
        return HistoryEntry(
            timestamp=mtime_ns // 1_000_000,
            content=content,
            file_path=str(snapshot),
            relative_path=snapshot.name,
        )

    def get_file_history(self, hash_dir: str) -> Optional[FileHistory]:
        """
        Read the history stored in one snapshot directory.

        Returns None when the directory is missing or unlistable, or when its
        metadata is absent, invalid, or lacks a ``resource``. A directory with
        valid metadata but no readable snapshots yields an empty history.
        """
        dir_path = self._history_dir / hash_dir
        if not dir_path.is_dir():
            return None

        metadata = self._parse_entries_json(dir_path)
        if metadata is None:
            return None
        resource = metadata.get("resource")
        if not resource or not isinstance(resource, str):
            return None

        try:
            names = sorted(
                entry.name for entry in os.scandir(dir_path)
                if entry.name != ENTRIES_FILENAME and not entry.is_dir()
            )
        except OSError as e:
            logger.warning("Failed to read history directory %s: %s", hash_dir, e)
            return None

        entries = []
        for name in names:
            entry = self._read_entry(dir_path / name)
            if entry is not None:
                entries.append(entry)

        # Names are opaque; modification time is the real chronology
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return FileHistory(
            original_file_path=resource,
            entries=tuple(entries),
            history_dir=hash_dir,
        )

    def get_all_file_histories(self) -> list[FileHistory]:
        """Every readable history in the store, in directory listing order."""
        histories = []
        for hash_dir in self.get_history_directories():
            history = self.get_file_history(hash_dir)
            if history is not None:
                histories.append(history)
        return histories

    # -------------------------------------------------------------------------
    # Index
    # -------------------------------------------------------------------------

    def find_history_by_file_path(self, target: str) -> Optional[FileHistory]:
        """
        Find the history recorded for a file.

        ``target`` may be a path or a ``file://`` URI. An exact match anywhere
        in the store wins over a case-insensitive one, so on case-sensitive
        filesystems ``/a/File.txt`` never shadows ``/a/file.txt``.
        """
        normalized_target = normalize_path(target)
        candidates = [
            (normalize_path(h.original_file_path), h)
            for h in self.get_all_file_histories()
        ]

        for normalized, history in candidates:
            if normalized == normalized_target:
                return history

        folded_target = normalized_target.casefold()
        for normalized, history in candidates:
            if normalized.casefold() == folded_target:
                return history

        return None

    def get_history_entry(self, target: str, index: int) -> tuple[FileHistory, HistoryEntry]:
        """
        Look up one entry of a file's history (0 = most recent).

        Raises:
            HistoryNotFoundError: If the store has no history for ``target``.
            EntryIndexError: If ``index`` is outside ``[0, len(entries))``.
        """
        history = self.find_history_by_file_path(target)
        if history is None:
            raise HistoryNotFoundError(target)
        if index < 0 or index >= len(history.entries):
            raise EntryIndexError(index, len(history.entries))
        return history, history.entries[index]

    def get_history_stats(self) -> HistoryStats:
        """Totals over a fresh scan of the store."""
        histories = self.get_all_file_histories()
        return HistoryStats(
            total_files=len(histories),
            total_entries=sum(len(h.entries) for h in histories),
            history_dir_exists=self.history_directory_exists(),
            history_dir_path=str(self._history_dir),
        )

    # -------------------------------------------------------------------------
    # Search and restore
    # -------------------------------------------------------------------------

    def search_history_content(self, term: str, case_sensitive: bool = False) -> list[SearchMatch]:
        """Literal substring search across every entry. See ``search``."""
        return _search(self.get_all_file_histories(), term, case_sensitive)

    def restore_from_history(
        self, file_path: str, entry_index: int, create_backup: bool = True,
    ) -> RestoreResult:
        """Write a snapshot back to disk. See ``restore``."""
        return _restore(self, file_path, entry_index, create_backup)

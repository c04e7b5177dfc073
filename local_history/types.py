"""
Data types for local history snapshots.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .paths import uri_to_path


def utc_iso(timestamp_ms: int) -> str:
    """Format a millisecond epoch timestamp as ISO-8601 UTC with a ``Z`` suffix.

    Matches the shape of JavaScript's ``Date.toISOString()``:
    ``YYYY-MM-DDTHH:MM:SS.mmmZ``.
    """
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def local_time(timestamp_ms: int) -> str:
    """Format a millisecond epoch timestamp in the local timezone for display."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).astimezone()
    return dt.strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class HistoryEntry:
    """
    One snapshot of a file as saved by the editor.

    Attributes:
        timestamp: Modification time of the snapshot file, in milliseconds
            since the epoch. This is the only ordering key.
        content: Full text of the file at that point in time.
        file_path: Absolute location of the snapshot file itself.
        relative_path: Name of the snapshot file inside its history directory.
            Assigned by the editor and not chronological.
    """
    timestamp: int
    content: str
    file_path: str
    relative_path: str

    @property
    def size(self) -> int:
        """Length of the content in characters."""
        return len(self.content)


@dataclass(frozen=True)
class FileHistory:
    """
    Complete timeline for one original file.

    ``original_file_path`` is the identity recorded by the editor, either a
    ``file://`` URI or a bare path. ``entries`` is ordered newest first.
    """
    original_file_path: str
    entries: tuple[HistoryEntry, ...] = ()
    history_dir: str = ""

    @property
    def path(self) -> str:
        """Filesystem form of the original file's identity."""
        return uri_to_path(self.original_file_path)

    @property
    def latest(self) -> Optional[HistoryEntry]:
        """Most recent entry, or None for a history with no readable snapshots."""
        return self.entries[0] if self.entries else None

    def to_dict(self, include_content: bool = False) -> dict:
        """Serialize to a JSON-ready dict."""
        entries = []
        for index, entry in enumerate(self.entries):
            d = {
                "index": index,
                "timestamp": entry.timestamp,
                "date": utc_iso(entry.timestamp),
                "file": entry.relative_path,
                "size": entry.size,
            }
            if include_content:
                d["content"] = entry.content
            entries.append(d)
        return {
            "path": self.original_file_path,
            "history_dir": self.history_dir,
            "entries": entries,
        }


@dataclass(frozen=True)
class HistoryStats:
    """Aggregate counts over the whole history store."""
    total_files: int
    total_entries: int
    history_dir_exists: bool
    history_dir_path: str

    @property
    def average_entries(self) -> Optional[float]:
        """Mean entries per file, or None when no files have history."""
        if self.total_files == 0:
            return None
        return self.total_entries / self.total_files


@dataclass(frozen=True)
class SearchMatch:
    """A history entry whose content contains the search term."""
    file: str              # original_file_path of the owning history
    entry_index: int       # 0 = most recent
    timestamp: str         # local display time
    match_count: int


@dataclass(frozen=True)
class RestoreResult:
    """Outcome of a restore request.

    Failures are reported here rather than raised: a missing history, a bad
    index or an unwritable target are normal outcomes for the caller to show.
    """
    success: bool
    message: str
    entry_index: int
    target_path: Optional[str] = None
    backup_path: Optional[str] = None
    timestamp: Optional[int] = None

"""
Restore a file from one of its Local History snapshots.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import EntryIndexError, HistoryNotFoundError
from .paths import uri_to_path
from .types import RestoreResult, local_time

if TYPE_CHECKING:
    from .history import LocalHistory

logger = logging.getLogger(__name__)

BACKUP_MARKER = ".backup."


def backup_path_for(target: Path) -> Path:
    """Unused sibling path for a backup of ``target``.

    Named ``<target>.backup.<epoch ms>``; a counter is appended when two
    backups land in the same millisecond.
    """
    stamp = int(time.time() * 1000)
    candidate = target.with_name(f"{target.name}{BACKUP_MARKER}{stamp}")
    n = 1
    while candidate.exists():
        candidate = target.with_name(f"{target.name}{BACKUP_MARKER}{stamp}-{n}")
        n += 1
    return candidate


def restore_from_history(
    index: "LocalHistory",
    file_path: str,
    entry_index: int,
    create_backup: bool = True,
) -> RestoreResult:
    """
    Overwrite a file with the content of one of its history entries.

    The caller's path is used as the target when it exists; otherwise the
    path the editor recorded, which covers files moved since they were
    snapshotted. A missing history, an out-of-range index and filesystem
    errors are all returned as unsuccessful results, never raised.
    """
    try:
        history, entry = index.get_history_entry(file_path, entry_index)
    except (HistoryNotFoundError, EntryIndexError) as e:
        return RestoreResult(success=False, message=str(e), entry_index=entry_index)

    input_path = Path(uri_to_path(file_path))
    target = input_path if input_path.exists() else Path(history.path)
    when = local_time(entry.timestamp)

    backup = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if create_backup and target.exists():
            backup = backup_path_for(target)
            shutil.copy2(target, backup)
        # Bytes, not text mode: no newline translation on Windows
        target.write_bytes(entry.content.encode("utf-8"))
    except OSError as e:
        logger.warning("Failed to restore %s from %s: %s", target, entry.file_path, e)
        return RestoreResult(
            success=False,
            message=f"Failed to restore file: {e}",
            entry_index=entry_index,
            target_path=str(target),
            backup_path=str(backup) if backup else None,
            timestamp=entry.timestamp,
        )

    logger.info("Restored %s to history entry %d (%s)", target, entry_index, when)
    lines = [f"Successfully restored {target} to history entry {entry_index}"]
    if backup is not None:
        lines.append(f"Backup created at: {backup}")
    lines.append(f"Restored to state from: {when}")
    if backup is None:
        lines.append("No backup was created")
    return RestoreResult(
        success=True,
        message="\n".join(lines),
        entry_index=entry_index,
        target_path=str(target),
        backup_path=str(backup) if backup else None,
        timestamp=entry.timestamp,
    )

"""
Full-text search over history snapshots.

Search is literal: the term is escaped before it becomes a pattern, so
``a.b`` matches only the three characters ``a.b``.
"""

import re
from typing import Iterable

from .types import FileHistory, SearchMatch, local_time


def compile_term(term: str, case_sensitive: bool = False) -> re.Pattern:
    """Pattern matching ``term`` literally."""
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(re.escape(term), flags)


def search_history_content(
    histories: Iterable[FileHistory],
    term: str,
    case_sensitive: bool = False,
) -> list[SearchMatch]:
    """
    Find every history entry whose content contains ``term``.

    Results follow the order of ``histories`` and, within a history, entry
    order (most recent first). ``entry_index`` is the entry's position in its
    history, so it can be passed straight to restore.

    An empty term matches every entry, once at each position between
    characters, so its count is the content length plus one.
    """
    pattern = compile_term(term, case_sensitive)
    results = []
    for history in histories:
        for index, entry in enumerate(history.entries):
            count = sum(1 for _ in pattern.finditer(entry.content))
            if count:
                results.append(SearchMatch(
                    file=history.original_file_path,
                    entry_index=index,
                    timestamp=local_time(entry.timestamp),
                    match_count=count,
                ))
    return results

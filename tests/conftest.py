"""
Shared pytest fixtures for local_history tests.

Builds a fake Local History store under tmp_path, laid out the way the
editor writes it, with explicit modification times on every snapshot.
"""

import json
import os
from pathlib import Path
from typing import Optional

import pytest

from local_history.history import LocalHistory

# A fixed base time (2025-06-27T14:30:00Z) keeps timestamps deterministic
BASE_MS = 1_751_034_600_000


class FakeHistoryStore:
    """Writes snapshot directories into a history root."""

    def __init__(self, root: Path):
        self.root = root

    def add_file(
        self,
        hash_dir: str,
        resource: Optional[str],
        snapshots: dict[str, tuple[str, int]] = None,
        metadata: Optional[dict] = None,
    ) -> Path:
        """Create one snapshot directory.

        Args:
            hash_dir: Directory name (the editor uses an opaque hash).
            resource: Value for entries.json ``resource``; omitted if None.
            snapshots: name -> (content, mtime in ms since epoch).
            metadata: Extra keys for entries.json.
        """
        d = self.root / hash_dir
        d.mkdir(parents=True, exist_ok=True)
        data = dict(metadata or {})
        if resource is not None:
            data["resource"] = resource
        (d / "entries.json").write_text(json.dumps(data), encoding="utf-8")
        for name, (content, mtime_ms) in (snapshots or {}).items():
            self.write_snapshot(hash_dir, name, content, mtime_ms)
        return d

    def write_snapshot(self, hash_dir: str, name: str, content, mtime_ms: int) -> Path:
        path = self.root / hash_dir / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        ns = mtime_ms * 1_000_000
        os.utime(path, ns=(ns, ns))
        return path


@pytest.fixture
def history_root(tmp_path):
    """An existing, empty history root."""
    root = tmp_path / "Code" / "User" / "History"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def store(history_root):
    return FakeHistoryStore(history_root)


@pytest.fixture
def lh(history_root):
    """LocalHistory reading the fake store."""
    return LocalHistory(history_dir=history_root)


@pytest.fixture
def project(tmp_path):
    """Directory standing in for the user's project."""
    p = tmp_path / "project"
    p.mkdir()
    return p


@pytest.fixture
def sample(store, project):
    """Store with one tracked file (two snapshots, recorded as a file:// URI)
    and one tracked by bare path (one snapshot).

    Snapshot names deliberately sort opposite to their chronology.
    """
    app_py = project / "app.py"
    notes = project / "my notes.txt"
    store.add_file(
        "-4f2a91c",
        app_py.as_uri(),
        {
            "AAAA.py": ("print('second')\n", BASE_MS + 60_000),
            "ZZZZ.py": ("print('first')\n", BASE_MS),
        },
    )
    store.add_file(
        "7be0d13",
        str(notes),
        {"k3Lp.txt": ("Foo and foo and FOO\n", BASE_MS + 120_000)},
    )
    return {"app_py": app_py, "notes": notes}

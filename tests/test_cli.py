"""Tests for the local-history CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from local_history import cli
from local_history.cli import app

from conftest import BASE_MS

runner = CliRunner()


@pytest.fixture(autouse=True)
def patch_history(lh, monkeypatch):
    """Commands read the fake store; JSON mode starts off for every test."""
    monkeypatch.setattr(cli, "LocalHistory", lambda: lh)
    monkeypatch.setattr(cli, "_json_output", False)


class TestList:
    def test_list(self, sample):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert str(sample["app_py"]) in result.output
        assert str(sample["notes"]) in result.output

    def test_list_empty(self):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "No files with local history." in result.output

    def test_list_json(self, sample):
        result = runner.invoke(app, ["--json", "list"])
        assert result.exit_code == 0
        data = {d["path"]: d for d in json.loads(result.output)}
        assert data[sample["app_py"].as_uri()]["entries"] == 2


class TestHistory:
    def test_history(self, sample):
        result = runner.invoke(app, ["history", str(sample["app_py"])])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == f"History for: {sample['app_py'].as_uri()}"
        assert lines[1].startswith("[0]") and lines[1].endswith("AAAA.py")
        assert lines[2].startswith("[1]") and lines[2].endswith("ZZZZ.py")

    def test_history_json(self, sample):
        result = runner.invoke(app, ["-j", "history", str(sample["app_py"])])
        data = json.loads(result.output)
        assert [e["timestamp"] for e in data["entries"]] == [BASE_MS + 60_000, BASE_MS]

    def test_history_not_found(self):
        result = runner.invoke(app, ["history", "/no/such/file"])
        assert result.exit_code == 1


class TestShow:
    def test_show_default_latest(self, sample):
        result = runner.invoke(app, ["show", str(sample["app_py"])])
        assert result.exit_code == 0
        assert result.output == "print('second')\n"

    def test_show_index(self, sample):
        result = runner.invoke(app, ["show", str(sample["app_py"]), "1"])
        assert result.output == "print('first')\n"

    def test_show_out_of_range(self, sample):
        result = runner.invoke(app, ["show", str(sample["app_py"]), "7"])
        assert result.exit_code == 1


class TestRestore:
    def test_restore(self, sample):
        sample["app_py"].write_text("current\n")
        result = runner.invoke(app, ["restore", str(sample["app_py"]), "1"])
        assert result.exit_code == 0
        assert "Backup created at:" in result.output
        assert sample["app_py"].read_text() == "print('first')\n"

    def test_restore_no_backup(self, sample):
        sample["app_py"].write_text("current\n")
        result = runner.invoke(app, ["restore", str(sample["app_py"]), "0", "--no-backup"])
        assert result.exit_code == 0
        assert list(sample["app_py"].parent.glob("app.py.backup.*")) == []

    def test_restore_failure_exit_code(self, sample):
        result = runner.invoke(app, ["restore", str(sample["app_py"]), "9"])
        assert result.exit_code == 1

    def test_restore_json(self, sample):
        result = runner.invoke(app, ["--json", "restore", str(sample["app_py"]), "0"])
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["target_path"] == str(sample["app_py"])


class TestStatsAndSearch:
    def test_stats(self, sample):
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0
        assert "Files:             2" in result.output
        assert "Entries:           3" in result.output

    def test_stats_json(self, sample):
        data = json.loads(runner.invoke(app, ["--json", "stats"]).output)
        assert data["total_files"] == 2
        assert data["average_entries"] == 1.5

    def test_search(self, sample):
        result = runner.invoke(app, ["search", "foo"])
        assert result.exit_code == 0
        assert "3 matches" in result.output

    def test_search_case_sensitive(self, sample):
        result = runner.invoke(app, ["search", "--case-sensitive", "foo"])
        assert "1 match" in result.output

    def test_search_no_matches(self, sample):
        result = runner.invoke(app, ["search", "zzz"])
        assert 'No matches found for "zzz".' in result.output

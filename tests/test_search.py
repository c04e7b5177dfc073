"""Tests for literal content search."""

import pytest

from local_history.search import compile_term, search_history_content
from local_history.types import FileHistory, HistoryEntry, local_time

from conftest import BASE_MS


def _history(path, *contents):
    entries = tuple(
        HistoryEntry(
            timestamp=BASE_MS - i * 1000,
            content=c,
            file_path=f"/store/h/{i}",
            relative_path=str(i),
        )
        for i, c in enumerate(contents)
    )
    return FileHistory(original_file_path=path, entries=entries)


class TestCaseSensitivity:
    @pytest.fixture
    def histories(self):
        return [_history("/x/a.txt", "has Foo", "has FOO", "has foo", "has nothing")]

    def test_insensitive_matches_all_cases(self, histories):
        matches = search_history_content(histories, "foo", case_sensitive=False)
        assert [m.entry_index for m in matches] == [0, 1, 2]

    def test_sensitive_matches_exact_case(self, histories):
        matches = search_history_content(histories, "foo", case_sensitive=True)
        assert [m.entry_index for m in matches] == [2]

    def test_default_is_insensitive(self, histories):
        assert len(search_history_content(histories, "FOO")) == 3


class TestLiteralMatching:
    @pytest.mark.parametrize("term,content,expected", [
        ("a.b", "a.b axb", 1),
        ("(x)", "f(x) + g(x)", 2),
        ("[0-9]+", "[0-9]+ and 123", 1),
        ("$HOME", "echo $HOME", 1),
        ("\\n", "literal \\n here", 1),
        ("a|b", "a b", 0),
        ("*", "2 * 3 * 4", 2),
    ])
    def test_metacharacters_are_literal(self, term, content, expected):
        matches = search_history_content([_history("/f", content)], term, case_sensitive=True)
        assert sum(m.match_count for m in matches) == expected

    def test_counts_non_overlapping(self):
        (m,) = search_history_content([_history("/f", "aaaa")], "aa")
        assert m.match_count == 2

    def test_empty_term_matches_every_entry(self):
        matches = search_history_content([_history("/f", "abc", "")], "")
        assert [m.entry_index for m in matches] == [0, 1]
        assert [m.match_count for m in matches] == [4, 1]

    def test_compile_term(self):
        assert compile_term("A.b").pattern == r"A\.b"
        assert compile_term("x", case_sensitive=False).search("X")
        assert compile_term("x", case_sensitive=True).search("X") is None


class TestResults:
    def test_record_fields(self):
        history = _history("file:///x/a.txt", "no", "one foo two foo")
        (m,) = search_history_content([history], "foo")
        assert m.file == "file:///x/a.txt"
        assert m.entry_index == 1
        assert m.match_count == 2
        assert m.timestamp == local_time(BASE_MS - 1000)

    def test_order_follows_histories_then_entries(self):
        histories = [
            _history("/b.txt", "foo", "foo"),
            _history("/a.txt", "bar", "foo"),
        ]
        matches = search_history_content(histories, "foo")
        assert [(m.file, m.entry_index) for m in matches] == [
            ("/b.txt", 0), ("/b.txt", 1), ("/a.txt", 1),
        ]

    def test_no_histories(self):
        assert search_history_content([], "foo") == []


class TestThroughLocalHistory:
    def test_search_store(self, sample, lh):
        matches = lh.search_history_content("foo")
        assert len(matches) == 1
        assert matches[0].file == str(sample["notes"])
        assert matches[0].match_count == 3

        sensitive = lh.search_history_content("foo", case_sensitive=True)
        assert sensitive[0].match_count == 1

    def test_entry_index_is_restorable(self, sample, lh):
        (m,) = lh.search_history_content("first")
        _, entry = lh.get_history_entry(str(sample["app_py"]), m.entry_index)
        assert "first" in entry.content

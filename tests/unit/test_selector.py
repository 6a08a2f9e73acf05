"""Unit tests for specsuite.selector."""

import pytest

from specsuite.errors import NoSuchTestError
from specsuite.models import IGNORE_TAG, Scope, Tag, TestEntry
from specsuite.selector import is_selected, runnable_count, select

TRUNK = Scope(name="", kind="trunk")


def _entry(name: str, *tags: str) -> TestEntry:
    return TestEntry(scope=TRUNK, spec_text=name, name=name, tags=frozenset(tags))


ENTRIES = (
    _entry("plain"),
    _entry("slow one", "slow"),
    _entry("slow and flaky", "slow", "flaky"),
    _entry("ignored", IGNORE_TAG),
    _entry("ignored and slow", IGNORE_TAG, "slow"),
)


def _names(selections) -> list[str]:
    return [s.entry.name for s in selections]


class TestIsSelected:
    @pytest.mark.parametrize(
        ("tags", "include", "exclude", "expected"),
        [
            (set(), set(), set(), True),
            ({"a"}, set(), set(), True),
            ({"a"}, {"a"}, set(), True),
            ({"a"}, {"b"}, set(), False),
            (set(), {"b"}, set(), False),
            ({"a"}, set(), {"a"}, False),
            ({"a", "b"}, {"a"}, {"b"}, False),
            ({"a"}, {"a"}, {"a"}, False),
        ],
    )
    def test_rule(self, tags, include, exclude, expected) -> None:
        assert is_selected(frozenset(tags), frozenset(include), frozenset(exclude)) is expected


class TestSelect:
    def test_no_filters_keeps_declaration_order(self) -> None:
        assert _names(select(None, (), (), ENTRIES)) == [e.name for e in ENTRIES]

    def test_ignored_entries_marked(self) -> None:
        result = {s.entry.name: s.will_ignore for s in select(None, (), (), ENTRIES)}
        assert result == {
            "plain": False,
            "slow one": False,
            "slow and flaky": False,
            "ignored": True,
            "ignored and slow": True,
        }

    def test_include_narrows_without_reordering(self) -> None:
        assert _names(select(None, {"slow"}, (), ENTRIES)) == [
            "slow one",
            "slow and flaky",
            "ignored and slow",
        ]

    def test_exclude_wins(self) -> None:
        assert _names(select(None, {"slow"}, {"flaky"}, ENTRIES)) == [
            "slow one",
            "ignored and slow",
        ]

    def test_excluding_ignore_tag_drops_ignored(self) -> None:
        assert "ignored" not in _names(select(None, (), {IGNORE_TAG}, ENTRIES))

    def test_accepts_tag_objects(self) -> None:
        assert _names(select(None, [Tag("flaky")], (), ENTRIES)) == ["slow and flaky"]

    def test_explicit_name_bypasses_filters(self) -> None:
        (selection,) = select("slow and flaky", {"nothing"}, {"flaky"}, ENTRIES)
        assert selection.entry.name == "slow and flaky"
        assert selection.will_ignore is False

    def test_explicit_name_runs_ignored(self) -> None:
        (selection,) = select("ignored", (), (), ENTRIES)
        assert selection.will_ignore is False

    def test_unknown_name(self) -> None:
        with pytest.raises(NoSuchTestError) as info:
            select("missing", (), (), ENTRIES)
        assert info.value.test_name == "missing"
        assert str(info.value) == 'No test in this suite has name: "missing"'

    def test_no_such_test_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            select("missing", (), (), ENTRIES)

    def test_idempotent(self) -> None:
        assert select(None, {"slow"}, (), ENTRIES) == select(None, {"slow"}, (), ENTRIES)


class TestRunnableCount:
    def test_excludes_ignored(self) -> None:
        assert runnable_count((), (), ENTRIES) == 3

    def test_with_filters(self) -> None:
        assert runnable_count({"slow"}, {"flaky"}, ENTRIES) == 1

"""Selection of the tests to run for a request."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from specsuite.errors import NoSuchTestError
from specsuite.models import IGNORE_TAG, Selection, TagLike, TestEntry, tag_names


def is_selected(tags: frozenset[str], include: frozenset[str], exclude: frozenset[str]) -> bool:
    """True if a test with ``tags`` passes the filters. Exclusion wins over inclusion."""
    if include and not (tags & include):
        return False
    return not (tags & exclude)


def select(
    explicit_name: str | None,
    include: Iterable[TagLike],
    exclude: Iterable[TagLike],
    entries: Sequence[TestEntry],
) -> list[Selection]:
    """Compute the ordered tests to run.

    An explicit name always runs that one test, regardless of tags, even
    if it was registered as ignored. Otherwise tests are filtered by tags and
    keep their declaration order.
    """
    if explicit_name is not None:
        for entry in entries:
            if entry.name == explicit_name:
                return [Selection(entry, will_ignore=False)]
        raise NoSuchTestError(explicit_name)

    include_names = tag_names(include)
    exclude_names = tag_names(exclude)
    return [
        Selection(entry, will_ignore=IGNORE_TAG in entry.tags)
        for entry in entries
        if is_selected(entry.tags, include_names, exclude_names)
    ]


def runnable_count(
    include: Iterable[TagLike],
    exclude: Iterable[TagLike],
    entries: Sequence[TestEntry],
) -> int:
    """Number of tests the filters would actually run (ignored ones excluded)."""
    return sum(1 for s in select(None, include, exclude, entries) if not s.will_ignore)

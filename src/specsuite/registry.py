"""Immutable registration state, its fail-fast cell, and test tree traversal."""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Generic, TypeVar

from specsuite.errors import ConcurrentModificationError
from specsuite.models import InfoEntry, Scope, TestEntry

T = TypeVar("T")


@dataclass(frozen=True)
class RegistryState:
    """A snapshot of everything registered so far.

    Every change produces a new snapshot. ``entries`` keeps declaration order;
    ``tags_by_name`` only holds tests that have at least one tag.
    """

    trunk: Scope
    current_scope: Scope
    entries: tuple[TestEntry, ...] = ()
    tags_by_name: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    registration_closed: bool = False

    @classmethod
    def initial(cls, trunk: Scope | None = None) -> RegistryState:
        trunk = trunk or Scope(name="", kind="trunk")
        return cls(trunk=trunk, current_scope=trunk)

    def __contains__(self, test_name: object) -> bool:
        return any(e.name == test_name for e in self.entries)

    def entry(self, test_name: str) -> TestEntry | None:
        for e in self.entries:
            if e.name == test_name:
                return e
        return None

    @property
    def test_names(self) -> list[str]:
        return [e.name for e in self.entries]

    def with_added_test(self, entry: TestEntry) -> RegistryState:
        tags = dict(self.tags_by_name)
        if entry.tags:
            tags[entry.name] = entry.tags
        return replace(
            self,
            entries=self.entries + (entry,),
            tags_by_name=MappingProxyType(tags),
        )

    def with_added_tag(self, test_name: str, tags: frozenset[str]) -> RegistryState:
        merged = dict(self.tags_by_name)
        merged[test_name] = merged.get(test_name, frozenset()) | tags
        entries = tuple(
            replace(e, tags=merged[test_name]) if e.name == test_name else e
            for e in self.entries
        )
        return replace(self, entries=entries, tags_by_name=MappingProxyType(merged))

    def with_current_scope(self, scope: Scope) -> RegistryState:
        return replace(self, current_scope=scope)

    def with_closed_registration(self) -> RegistryState:
        return replace(self, registration_closed=True)


class StateCell(Generic[T]):
    """A reference cell whose updates fail loudly when the base value is stale.

    This detects a suite escaping its constructor to another thread; it is
    not a lock and never waits.
    """

    def __init__(self, value: T, what: str = "registration state") -> None:
        self._value = value
        self._what = what
        self._lock = threading.Lock()

    def get(self) -> T:
        return self._value

    def swap(self, expected: T, new: T) -> None:
        with self._lock:
            if self._value is not expected:
                raise ConcurrentModificationError(
                    f"The {self._what} was modified concurrently by another thread"
                )
            self._value = new


def walk(scope: Scope) -> Iterator[Scope | TestEntry | InfoEntry]:
    """Yield every node below ``scope`` depth-first, in declaration order."""
    for child in list(scope.children):
        yield child
        if isinstance(child, Scope):
            yield from walk(child)


def count_tests(scope: Scope) -> int:
    return sum(1 for node in walk(scope) if isinstance(node, TestEntry))

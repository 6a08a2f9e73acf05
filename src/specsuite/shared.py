"""Shared behaviors: reusable groups of tests included from several scopes."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from specsuite.models import TagLike, tag_names

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class SharedTest:
    spec_text: str
    tags: frozenset[str] = frozenset()
    body: Callable[..., Any] | None = field(default=None, repr=False, compare=False)
    ignored: bool = False


class SharedBehavior:
    """An ordered group of tests that can be spliced into any suite scope.

    Tests are recorded here, not on a suite. Including the behavior
    registers each of them under the including scope, so names differ per
    inclusion site::

        def non_empty_stack(stack):
            behavior = SharedBehavior("non-empty stack")

            @behavior.test("is not empty")
            def _():
                assert stack

            return behavior
    """

    def __init__(self, description: str = "") -> None:
        self.description = description
        self._tests: list[SharedTest] = []

    @property
    def tests(self) -> tuple[SharedTest, ...]:
        return tuple(self._tests)

    def __len__(self) -> int:
        return len(self._tests)

    def add(
        self,
        spec_text: str,
        body: Callable[..., Any] | None,
        tags: Iterable[TagLike] = (),
        ignored: bool = False,
    ) -> None:
        self._tests.append(SharedTest(spec_text, tag_names(tags), body, ignored))

    def test(self, spec_text: str, *tags: TagLike) -> Callable[[F], F]:
        def decorator(body: F) -> F:
            self.add(spec_text, body, tags)
            return body

        return decorator

    def ignore(self, spec_text: str, *tags: TagLike) -> Callable[[F], F]:
        def decorator(body: F) -> F:
            self.add(spec_text, body, tags, ignored=True)
            return body

        return decorator

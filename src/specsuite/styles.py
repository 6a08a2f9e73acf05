"""Style adapters: each one is a vocabulary over the same registration engine.

Scope-opening methods take the scope's body directly or decorate it::

    class StackSpec(FunSpec):
        def __init__(self):
            super().__init__()

            @self.describe("A Stack")
            def _():
                @self.it("pops values in last-in-first-out order")
                def _():
                    ...

Test-declaring methods do the same: pass ``body=`` or decorate the body.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, ClassVar

from specsuite.errors import NotAllowedError
from specsuite.models import TagLike, tag_names
from specsuite.shared import SharedBehavior
from specsuite.suite import Suite

Body = Callable[..., Any]

TAGS_ATTR = "__specsuite_tags__"
IGNORED_ATTR = "__specsuite_ignored__"


class StyleSuite(Suite):
    """Helpers shared by the style adapters."""

    def _scope(
        self,
        name: str,
        body: Callable[[], Any] | None,
        kind: str,
        child_prefix: str | None = None,
    ) -> Any:
        if body is not None:
            self.engine.enter_scope(name, body, kind, child_prefix)
            return body

        def decorator(fn: Callable[[], Any]) -> Callable[[], Any]:
            self.engine.enter_scope(name, fn, kind, child_prefix)
            return fn

        return decorator

    def _test(
        self,
        spec_text: str,
        tags: tuple[TagLike, ...],
        body: Body | None,
        ignored: bool = False,
    ) -> Any:
        register = self.engine.register_ignored_test if ignored else self.engine.register_test
        if body is not None:
            return register(spec_text, tags, body)

        def decorator(fn: Body) -> Body:
            register(spec_text, tags, fn)
            return fn

        return decorator

    def behaves_like(self, behavior: SharedBehavior) -> list[str]:
        """Include ``behavior`` in the current scope and return the new test names."""
        return self.engine.register_shared_behavior(behavior)


class FunSuite(StyleSuite):
    """Flat list of named tests: ``test("addition works")``."""

    def test(self, name: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(name, tags, body)

    def ignore(self, name: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(name, tags, body, ignored=True)


class FunSpec(StyleSuite):
    """Nested ``describe`` blocks holding ``it`` tests."""

    def describe(self, text: str, body: Callable[[], Any] | None = None) -> Any:
        return self._scope(text, body, "describe")

    def it(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(text, tags, body)

    def ignore(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(text, tags, body, ignored=True)


class FeatureSpec(StyleSuite):
    """Features made of scenarios. Features cannot contain features."""

    non_nesting_kinds: ClassVar[frozenset[str]] = frozenset({"feature"})

    def feature(self, text: str, body: Callable[[], Any] | None = None) -> Any:
        return self._scope(f"Feature: {text}", body, "feature")

    def scenario(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(f"Scenario: {text}", tags, body)

    def ignore(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(f"Scenario: {text}", tags, body, ignored=True)


class FlatSpec(StyleSuite):
    """One level of subjects: ``behavior_of("A Stack")`` then ``it_should(...)``."""

    def behavior_of(self, subject: str) -> None:
        self.engine.open_flat_scope(subject, kind="behavior", child_prefix="should")

    def _check_subject(self, text: str) -> None:
        self.engine.check_open("A test")
        if self.engine.current_scope.is_trunk:
            raise NotAllowedError(
                f"Test {text!r} was declared before any subject; call behavior_of first"
            )

    def it_should(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        self._check_subject(text)
        return self._test(text, tags, body)

    def ignore(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        self._check_subject(text)
        return self._test(text, tags, body, ignored=True)

    def behaves_like(self, behavior: SharedBehavior) -> list[str]:
        self._check_subject(behavior.description or "shared behavior")
        return super().behaves_like(behavior)


class WordSpec(StyleSuite):
    """Subjects followed by a verb: ``when``, ``should``, ``must`` or ``can``."""

    def when(self, subject: str, body: Callable[[], Any] | None = None) -> Any:
        return self._scope(subject, body, "when", "when")

    def should(self, subject: str, body: Callable[[], Any] | None = None) -> Any:
        return self._scope(subject, body, "should", "should")

    def must(self, subject: str, body: Callable[[], Any] | None = None) -> Any:
        return self._scope(subject, body, "must", "must")

    def can(self, subject: str, body: Callable[[], Any] | None = None) -> Any:
        return self._scope(subject, body, "can", "can")

    def in_(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(text, tags, body)

    def ignore(self, text: str, *tags: TagLike, body: Body | None = None) -> Any:
        return self._test(text, tags, body, ignored=True)


def tagged(*tags: TagLike) -> Callable[[Body], Body]:
    """Attach tags to a ``MethodSuite`` test method."""
    names = tag_names(tags)

    def decorator(fn: Body) -> Body:
        setattr(fn, TAGS_ATTR, getattr(fn, TAGS_ATTR, frozenset()) | names)
        return fn

    return decorator


def ignored(fn: Body) -> Body:
    """Mark a ``MethodSuite`` test method as ignored."""
    setattr(fn, IGNORED_ATTR, True)
    return fn


class MethodSuite(StyleSuite):
    """Every ``test_*`` method is a test, named after the method.

    Methods are registered in definition order, base classes first. An
    overriding method keeps the position of the method it overrides.
    """

    def __init__(self) -> None:
        super().__init__()
        for name in self._test_method_names():
            method = getattr(self, name)
            function = getattr(type(self), name)
            tags = getattr(function, TAGS_ATTR, frozenset())
            if getattr(function, IGNORED_ATTR, False):
                self.engine.register_ignored_test(name, tags, method)
            else:
                self.engine.register_test(name, tags, method)

    @classmethod
    def _test_method_names(cls) -> list[str]:
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, value in vars(klass).items():
                if name.startswith("test_") and inspect.isfunction(value) and name not in names:
                    names.append(name)
        return names

"""Shared test fixtures for specsuite."""

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from specsuite.assertions import intercept, pending
from specsuite.reporters import RecordingReporter
from specsuite.shared import SharedBehavior
from specsuite.styles import FunSpec, FunSuite


def non_empty_stack(stack: list[int]) -> SharedBehavior:
    behavior = SharedBehavior("non-empty stack")

    @behavior.test("is not empty")
    def _() -> None:
        assert stack

    @behavior.test("returns the top item on peek")
    def _() -> None:
        assert stack[-1] == stack[-1]

    return behavior


class StackSpec(FunSpec):
    """Nested describes, a shared behavior, a pending test and an ignored test."""

    def __init__(self) -> None:
        super().__init__()
        self.empty: list[int] = []
        self.full = [1, 2, 3]

        @self.describe("A Stack")
        def _() -> None:
            @self.describe("when empty")
            def _() -> None:
                @self.it("is empty")
                def _() -> None:
                    assert self.empty == []

                @self.it("complains on pop", "errors")
                def _() -> None:
                    intercept(IndexError, self.empty.pop)

            @self.describe("when full")
            def _() -> None:
                self.behaves_like(non_empty_stack(self.full))

                self.it("grows without bound", body=pending)

                @self.ignore("complains on push", "slow")
                def _() -> None:
                    raise AssertionError("should not run")


class MixedOutcomes(FunSuite):
    """One test per outcome, in a fixed order."""

    def __init__(self) -> None:
        super().__init__()
        self.ran: list[str] = []

        @self.test("passes", "fast")
        def _() -> None:
            self.ran.append("passes")

        @self.test("fails", "slow")
        def _() -> None:
            self.ran.append("fails")
            assert 1 == 2, "one is not two"

        @self.test("is pending")
        def _() -> None:
            self.ran.append("is pending")
            pending()

        @self.ignore("is ignored", "fast")
        def _() -> None:
            self.ran.append("is ignored")


@pytest.fixture
def recorder() -> RecordingReporter:
    """A reporter that keeps every event it receives."""
    return RecordingReporter()


@pytest.fixture
def stack_spec() -> StackSpec:
    return StackSpec()


@pytest.fixture
def mixed_suite() -> MixedOutcomes:
    return MixedOutcomes()


SUITES_MODULE = '''\
from specsuite import FunSpec, FunSuite, pending


class Arithmetic(FunSuite):
    def __init__(self):
        super().__init__()

        @self.test("adds", "fast")
        def _():
            assert 1 + 1 == 2

        @self.test("divides by zero", "slow")
        def _():
            1 / 0

        @self.ignore("multiplies")
        def _():
            assert 2 * 2 == 4


class Greeting(FunSpec):
    def __init__(self):
        super().__init__()

        @self.describe("A greeting")
        def _():
            @self.it("says hello")
            def _():
                assert "hello".startswith("h")

            self.it("says goodbye", body=pending)
'''


@pytest.fixture
def suites_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """A project directory holding an importable ``demo_suites`` module."""
    (tmp_path / "demo_suites.py").write_text(SUITES_MODULE)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.delitem(sys.modules, "demo_suites", raising=False)
    yield tmp_path
    sys.modules.pop("demo_suites", None)

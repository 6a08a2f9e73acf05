"""Execution of selected tests with lifecycle event reporting."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from specsuite import events
from specsuite.engine import RegistrationEngine
from specsuite.errors import ConcurrentModificationError, TestPendingError
from specsuite.informers import RecordingInformer
from specsuite.models import (
    Failed,
    Ignored,
    InfoEntry,
    Outcome,
    Pending,
    Scope,
    Selection,
    Succeeded,
    TestEntry,
)
from specsuite.names import display_text
from specsuite.registry import walk
from specsuite.reporters import Reporter

Stopper = Callable[[], bool]

# Failures that mean the interpreter itself can't be trusted to keep going.
ABORTING_ERRORS: tuple[type[BaseException], ...] = (
    MemoryError,
    RecursionError,
    SystemError,
    ConcurrentModificationError,
)


def is_aborting(exc: BaseException) -> bool:
    """True if ``exc`` must stop the whole run instead of failing one test."""
    return not isinstance(exc, Exception) or isinstance(exc, ABORTING_ERRORS)


def failure_message(exc: BaseException) -> str:
    text = str(exc)
    return text if text else repr(exc)


def _default_invoke(entry: TestEntry) -> None:
    if entry.body is None:
        raise TestPendingError()
    entry.body()


class Executor:
    """Runs tests of one suite, strictly sequentially, reporting each one."""

    def __init__(
        self,
        engine: RegistrationEngine,
        reporter: Reporter,
        tracker: events.Tracker,
        suite_name: str,
        suite_class: str | None = None,
        invoke: Callable[[TestEntry], object] = _default_invoke,
        rerun_reference: str | None = None,
    ) -> None:
        self.engine = engine
        self.reporter = reporter
        self.tracker = tracker
        self.suite_name = suite_name
        self.suite_class = suite_class
        self.invoke = invoke
        self.rerun_reference = rerun_reference

    def _test_fields(self, entry: TestEntry) -> dict[str, object]:
        return {
            "ordinal": self.tracker.next_ordinal(),
            "suite_name": self.suite_name,
            "suite_class": self.suite_class,
            "test_name": entry.name,
            "test_text": display_text(entry.scope, entry.spec_text),
            "indent": entry.depth,
            "rerunner": (
                events.Rerunner(self.rerun_reference, entry.name)
                if self.rerun_reference is not None
                else None
            ),
        }

    def _report_info(self, message: str, entry: TestEntry | None, indent: int) -> None:
        self.reporter(events.InfoProvided(
            ordinal=self.tracker.next_ordinal(),
            message=message,
            suite_name=self.suite_name,
            suite_class=self.suite_class,
            test_name=entry.name if entry is not None else None,
            indent=indent,
        ))

    def run_one(self, selection: Selection) -> Outcome:
        """Run a single test and report its lifecycle.

        Info messages recorded while the body runs are reported after the
        test's terminal event. Aborting errors propagate unchanged.
        """
        entry = selection.entry
        if selection.will_ignore:
            self.reporter(events.TestIgnored(**self._test_fields(entry)))  # type: ignore[arg-type]
            return Ignored()

        self.reporter(events.TestStarting(**self._test_fields(entry)))  # type: ignore[arg-type]

        recorder = RecordingInformer(
            lambda message: self._report_info(message, entry, entry.depth + 1)
        )
        previous = self.engine.install_informer(recorder)
        try:
            start = time.monotonic()
            outcome: Outcome
            try:
                self.invoke(entry)
            except TestPendingError:
                outcome = Pending()
                self.reporter(events.TestPending(**self._test_fields(entry)))  # type: ignore[arg-type]
            except Exception as exc:
                if is_aborting(exc):
                    raise
                duration = time.monotonic() - start
                outcome = Failed(cause=exc, duration=duration, message=failure_message(exc))
                self.reporter(events.TestFailed(
                    **self._test_fields(entry),  # type: ignore[arg-type]
                    message=outcome.message,
                    cause=exc,
                    duration=duration,
                ))
            else:
                duration = time.monotonic() - start
                outcome = Succeeded(duration=duration)
                self.reporter(events.TestSucceeded(
                    **self._test_fields(entry),  # type: ignore[arg-type]
                    duration=duration,
                ))
            recorder.flush()
        finally:
            self.engine.restore_informer(recorder, previous)
        return outcome

    def run_many(self, selections: Sequence[Selection], stopper: Stopper) -> list[Outcome]:
        """Run ``selections`` in order, checking ``stopper`` before each test."""
        outcomes: list[Outcome] = []
        for selection in selections:
            if stopper():
                break
            outcomes.append(self.run_one(selection))
        return outcomes

    def run_tree(
        self, trunk: Scope, selections: Sequence[Selection], stopper: Stopper
    ) -> list[Outcome]:
        """Walk the test tree, reporting scopes and info leaves around the selected tests."""
        chosen = {s.entry.name: s for s in selections}
        outcomes: list[Outcome] = []
        self._run_branch(trunk, chosen, stopper, outcomes)
        return outcomes

    def _run_branch(
        self,
        scope: Scope,
        chosen: dict[str, Selection],
        stopper: Stopper,
        outcomes: list[Outcome],
    ) -> None:
        for child in list(scope.children):
            if stopper():
                return
            if isinstance(child, Scope):
                if not _has_content(child, chosen):
                    continue
                text = display_text(scope, child.name)
                self.reporter(events.ScopeOpened(
                    ordinal=self.tracker.next_ordinal(),
                    message=text,
                    suite_name=self.suite_name,
                    suite_class=self.suite_class,
                    indent=child.depth,
                ))
                self._run_branch(child, chosen, stopper, outcomes)
                self.reporter(events.ScopeClosed(
                    ordinal=self.tracker.next_ordinal(),
                    message=text,
                    suite_name=self.suite_name,
                    suite_class=self.suite_class,
                    indent=child.depth,
                ))
            elif isinstance(child, TestEntry):
                selection = chosen.get(child.name)
                if selection is not None:
                    outcomes.append(self.run_one(selection))
            elif isinstance(child, InfoEntry):
                self._report_info(child.message, None, child.depth)


def _has_content(scope: Scope, chosen: dict[str, Selection]) -> bool:
    for node in walk(scope):
        if isinstance(node, InfoEntry):
            return True
        if isinstance(node, TestEntry) and node.name in chosen:
            return True
    return False

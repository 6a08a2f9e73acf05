"""The ``Suite`` base class: registration during construction, execution on ``run``."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from specsuite import events
from specsuite.engine import RegistrationEngine
from specsuite.errors import NotAllowedError, TestPendingError
from specsuite.executor import Executor, Stopper
from specsuite.informers import ReportingInformer, ZombieInformer
from specsuite.models import NoArgTest, OneArgTest, TagLike, TestEntry, tag_names
from specsuite.reporters import Reporter, wrap_reporter
from specsuite.selector import runnable_count, select

if TYPE_CHECKING:
    from specsuite.distributor import Distributor


def never_stop() -> bool:
    return False


class FlagStopper:
    """A stopper that reports a stop once ``request_stop`` has been called."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def request_stop(self) -> None:
        self._event.set()

    def __call__(self) -> bool:
        return self._event.is_set()


def _discard(event: events.Event) -> None:
    return None


class Suite:
    """A collection of tests registered while the instance is constructed.

    Subclasses declare tests in ``__init__`` (after calling
    ``super().__init__()``) through a style's vocabulary. Calling ``run``
    closes registration for good and executes the selected tests in
    declaration order.
    """

    non_nesting_kinds: ClassVar[frozenset[str]] = frozenset()
    trunk_prefix: ClassVar[str | None] = None

    def __init__(self) -> None:
        self._engine = RegistrationEngine(
            self.suite_name,
            non_nesting_kinds=self.non_nesting_kinds,
            trunk_prefix=self.trunk_prefix,
        )

    @property
    def suite_name(self) -> str:
        return type(self).__name__

    @property
    def suite_class(self) -> str:
        cls = type(self)
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def rerun_reference(self) -> str | None:
        """``module:Class`` that rebuilds this suite with no arguments, if there is one."""
        cls = type(self)
        if "." in cls.__qualname__ or cls.__module__ == "__main__":
            return None
        return f"{cls.__module__}:{cls.__qualname__}"

    @property
    def engine(self) -> RegistrationEngine:
        return self._engine

    @property
    def test_names(self) -> list[str]:
        return self._engine.test_names

    @property
    def tags(self) -> dict[str, frozenset[str]]:
        return self._engine.tags

    @property
    def nested_suites(self) -> Sequence[Suite]:
        return []

    def info(self, message: str) -> None:
        """Provide an informational message to whichever informer is current."""
        self._engine.informer(message)

    def expected_test_count(
        self, include: Iterable[TagLike] = (), exclude: Iterable[TagLike] = ()
    ) -> int:
        """Tests that a run with these filters would execute, nested suites included."""
        include, exclude = tag_names(include), tag_names(exclude)
        own = runnable_count(include, exclude, self._engine.state.entries)
        return own + sum(s.expected_test_count(include, exclude) for s in self.nested_suites)

    # -- running ------------------------------------------------------------

    def run(
        self,
        test_name: str | None = None,
        reporter: Reporter | None = None,
        stopper: Stopper | None = None,
        include: Iterable[TagLike] = (),
        exclude: Iterable[TagLike] = (),
        config_map: Mapping[str, Any] | None = None,
        distributor: Distributor | None = None,
        tracker: events.Tracker | None = None,
    ) -> None:
        """Run this suite's tests, then its nested suites.

        Failures are reported as events only; this returns normally unless an
        aborting error occurs. When ``test_name`` is given only that test
        runs, tags notwithstanding, and nested suites are skipped.
        """
        self._engine.close_registration()
        report = wrap_reporter(reporter or _discard)
        stopper = stopper or never_stop
        tracker = tracker or events.Tracker()
        config_map = dict(config_map or {})
        include, exclude = tag_names(include), tag_names(exclude)

        suite_informer = ReportingInformer(
            lambda message: report(events.InfoProvided(
                ordinal=tracker.next_ordinal(),
                message=message,
                suite_name=self.suite_name,
                suite_class=self.suite_class,
                indent=1,
            ))
        )
        self._engine.install_informer(suite_informer)
        try:
            self.run_contents(
                test_name, report, stopper, include, exclude, config_map, distributor, tracker
            )
        finally:
            self._engine.restore_informer(suite_informer, ZombieInformer(self.suite_name))

    def run_contents(
        self,
        test_name: str | None,
        reporter: Reporter,
        stopper: Stopper,
        include: frozenset[str],
        exclude: frozenset[str],
        config_map: Mapping[str, Any],
        distributor: Distributor | None,
        tracker: events.Tracker,
    ) -> None:
        """Run the selected tests, then the nested suites.

        ``run`` calls this with registration closed and the suite informer
        installed. Override it to wrap a whole run of the suite.
        """
        self.run_tests(test_name, reporter, stopper, include, exclude, config_map, tracker)
        if test_name is None:
            self.run_nested_suites(
                reporter, stopper, include, exclude, config_map, distributor, tracker
            )

    def execute(
        self,
        test_name: str | None = None,
        include: Iterable[TagLike] = (),
        exclude: Iterable[TagLike] = (),
        config_map: Mapping[str, Any] | None = None,
        color: bool = True,
        durations: bool = False,
    ) -> None:
        """Run this suite, printing results to standard output."""
        from specsuite.reporters import ConsoleReporter
        from specsuite.runner import run_suite

        run_suite(
            self,
            ConsoleReporter(color=color, show_durations=durations),
            test_name=test_name,
            include=include,
            exclude=exclude,
            config_map=config_map,
        )

    def run_tests(
        self,
        test_name: str | None,
        reporter: Reporter,
        stopper: Stopper,
        include: Iterable[TagLike],
        exclude: Iterable[TagLike],
        config_map: Mapping[str, Any],
        tracker: events.Tracker,
    ) -> None:
        selections = select(test_name, include, exclude, self._engine.state.entries)
        executor = Executor(
            self._engine,
            reporter,
            tracker,
            self.suite_name,
            self.suite_class,
            invoke=lambda entry: self.run_test(entry, config_map),
            rerun_reference=self.rerun_reference,
        )
        if test_name is not None:
            executor.run_many(selections, stopper)
        else:
            executor.run_tree(self._engine.trunk, selections, stopper)

    def run_test(self, entry: TestEntry, config_map: Mapping[str, Any]) -> Any:
        """Invoke one test body through ``with_fixture``. Override to wrap every test."""
        if entry.body is None:
            raise TestPendingError()
        if entry.arity == 0:
            return self.with_fixture(NoArgTest(entry.name, entry.body, config_map))
        return self.with_fixture(OneArgTest(entry.name, entry.body, config_map))

    def with_fixture(self, test: NoArgTest | OneArgTest) -> Any:
        """Supply what a test needs and invoke it.

        Tests whose body takes an argument need a suite that overrides this
        to pass a fixture in.
        """
        if isinstance(test, OneArgTest):
            raise NotAllowedError(
                f"Test {test.name!r} takes a fixture argument, but "
                f"{self.suite_name} does not override with_fixture to supply one"
            )
        return test()

    def run_nested_suites(
        self,
        reporter: Reporter,
        stopper: Stopper,
        include: Iterable[TagLike],
        exclude: Iterable[TagLike],
        config_map: Mapping[str, Any],
        distributor: Distributor | None,
        tracker: events.Tracker,
    ) -> None:
        from specsuite.runner import run_suite

        for suite in self.nested_suites:
            if stopper():
                break
            if distributor is not None:
                distributor.put(suite, tracker.next_tracker())
            else:
                run_suite(
                    suite,
                    reporter,
                    stopper=stopper,
                    include=include,
                    exclude=exclude,
                    config_map=config_map,
                    tracker=tracker,
                )


class Suites(Suite):
    """A suite with no tests of its own that runs the given suites in order."""

    def __init__(self, *suites: Suite, name: str | None = None) -> None:
        self._suites = list(suites)
        self._name = name
        super().__init__()

    @property
    def suite_name(self) -> str:
        return self._name or type(self).__name__

    @property
    def rerun_reference(self) -> str | None:
        if type(self) is Suites:
            return None
        return super().rerun_reference

    @property
    def nested_suites(self) -> Sequence[Suite]:
        return list(self._suites)

"""Before/after hooks, and per-test suite instances, around the tests of a suite."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from specsuite import events
from specsuite.errors import NoSuchTestError, NotAllowedError
from specsuite.executor import Stopper
from specsuite.informers import ZombieInformer
from specsuite.models import TestEntry
from specsuite.reporters import Reporter
from specsuite.suite import Suite

Hook = Callable[[], Any]


class BeforeAndAfter(Suite):
    """Mixin adding hooks. List it before the style: ``class S(BeforeAndAfter, FunSpec)``.

    Override ``before_all``/``after_all`` and ``before_each``/``after_each``,
    or register one function each with ``before`` and ``after`` while the
    suite is constructed. Per-test hooks run inside the test, so an error
    in one fails that test. ``after_each`` and ``after`` run even when the
    test fails, and ``after_all`` runs even when ``before_all`` or the suite
    does not finish. ``info`` works in every hook.
    """

    def __init__(self) -> None:
        self._before_hook: Hook | None = None
        self._after_hook: Hook | None = None
        super().__init__()

    def before_all(self) -> None:
        pass

    def after_all(self) -> None:
        pass

    def before_each(self) -> None:
        pass

    def after_each(self) -> None:
        pass

    def _check_hook(self, which: str, current: Hook | None) -> None:
        if self.engine.registration_closed:
            raise NotAllowedError(f"{which} cannot be registered once {self.suite_name} is running")
        if current is not None:
            raise NotAllowedError(f"{which} was already registered on {self.suite_name}")

    def before(self, fn: Hook) -> Hook:
        """Register ``fn`` to run before each test. May be used as a decorator."""
        self._check_hook("A before function", self._before_hook)
        self._before_hook = fn
        return fn

    def after(self, fn: Hook) -> Hook:
        """Register ``fn`` to run after each test. May be used as a decorator."""
        self._check_hook("An after function", self._after_hook)
        self._after_hook = fn
        return fn

    def run_contents(
        self,
        test_name: str | None,
        reporter: Reporter,
        stopper: Stopper,
        include: frozenset[str],
        exclude: frozenset[str],
        config_map: Mapping[str, Any],
        distributor: Any,
        tracker: events.Tracker,
    ) -> None:
        try:
            self.before_all()
            super().run_contents(
                test_name, reporter, stopper, include, exclude, config_map, distributor, tracker
            )
        finally:
            self.after_all()

    def run_test(self, entry: TestEntry, config_map: Mapping[str, Any]) -> Any:
        self.before_each()
        try:
            if self._before_hook is not None:
                self._before_hook()
            return super().run_test(entry, config_map)
        finally:
            try:
                if self._after_hook is not None:
                    self._after_hook()
            finally:
                self.after_each()


class OneInstancePerTest(Suite):
    """Mixin running every test body on a fresh instance of the suite.

    List it before the style: ``class S(OneInstancePerTest, FunSpec)``. The
    suite being run still selects tests and reports events. Each body runs
    on a new instance from ``new_instance``, so state built in ``__init__``
    is never shared between tests. Info from the body goes to the running
    suite's current informer.
    """

    def new_instance(self) -> Suite:
        return type(self)()

    def run_test(self, entry: TestEntry, config_map: Mapping[str, Any]) -> Any:
        instance = self.new_instance()
        fresh = instance.engine.state.entry(entry.name)
        if fresh is None:
            raise NoSuchTestError(entry.name)
        instance.engine.close_registration()
        informer = self.engine.informer
        instance.engine.install_informer(informer)
        try:
            return super(OneInstancePerTest, instance).run_test(fresh, config_map)
        finally:
            instance.engine.restore_informer(informer, ZombieInformer(instance.suite_name))

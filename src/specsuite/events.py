"""Report events and the ordinals that totally order them."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from specsuite.models import Summary, TagLike

if TYPE_CHECKING:
    from specsuite.executor import Stopper
    from specsuite.reporters import Reporter


@dataclass(frozen=True, order=True)
class Ordinal:
    """Position of an event in a run.

    Ordinals compare by run stamp, then stamp by stamp. Forking with
    ``next_new_old_pair`` gives the new thread ordinals that sort before
    everything the current thread reports afterwards.
    """

    run_stamp: int
    stamps: tuple[int, ...] = (0,)

    def next(self) -> Ordinal:
        return Ordinal(self.run_stamp, self.stamps[:-1] + (self.stamps[-1] + 1,))

    def next_new_old_pair(self) -> tuple[Ordinal, Ordinal]:
        for_new_thread = Ordinal(self.run_stamp, self.stamps + (0,))
        return for_new_thread, self.next()

    def __str__(self) -> str:
        return f"Ordinal({self.run_stamp}, {', '.join(map(str, self.stamps))})"


class Tracker:
    """Hands out consecutive ordinals for one thread of reporting."""

    def __init__(self, first: Ordinal | None = None) -> None:
        self._current = first or Ordinal(0)
        self._lock = threading.Lock()

    def next_ordinal(self) -> Ordinal:
        with self._lock:
            ordinal = self._current
            self._current = ordinal.next()
            return ordinal

    def next_tracker(self) -> Tracker:
        """Fork a tracker for a suite that will report from another thread."""
        with self._lock:
            for_new, for_this = self._current.next_new_old_pair()
            self._current = for_this
            return Tracker(for_new)


@dataclass(frozen=True)
class Rerunner:
    """Handle on an event that runs its suite, or one of its tests, again.

    The suite is rebuilt from ``suite_reference`` (``module:Class``), so
    a rerun sees a fresh instance and a fresh registration.
    """

    suite_reference: str
    test_name: str | None = None

    def __call__(
        self,
        reporters: Iterable[Reporter] = (),
        stopper: Stopper | None = None,
        include: Iterable[TagLike] = (),
        exclude: Iterable[TagLike] = (),
        config_map: Mapping[str, Any] | None = None,
    ) -> Summary:
        from specsuite.runner import rerun

        return rerun(
            self.suite_reference,
            reporters,
            test_name=self.test_name,
            stopper=stopper,
            include=include,
            exclude=exclude,
            config_map=config_map,
        )


@dataclass(frozen=True, kw_only=True)
class Event:
    kind: ClassVar[str] = "event"

    ordinal: Ordinal
    timestamp: float = field(default_factory=time.time, compare=False)


@dataclass(frozen=True, kw_only=True)
class TestEvent(Event):
    __test__: ClassVar[bool] = False

    suite_name: str
    suite_class: str | None = None
    test_name: str
    test_text: str
    indent: int = 0
    rerunner: Rerunner | None = field(default=None, compare=False)


@dataclass(frozen=True, kw_only=True)
class TestStarting(TestEvent):
    kind: ClassVar[str] = "test_starting"


@dataclass(frozen=True, kw_only=True)
class TestSucceeded(TestEvent):
    kind: ClassVar[str] = "test_succeeded"

    duration: float | None = None


@dataclass(frozen=True, kw_only=True)
class TestFailed(TestEvent):
    kind: ClassVar[str] = "test_failed"

    message: str
    cause: BaseException | None = field(default=None, compare=False)
    duration: float | None = None


@dataclass(frozen=True, kw_only=True)
class TestIgnored(TestEvent):
    kind: ClassVar[str] = "test_ignored"


@dataclass(frozen=True, kw_only=True)
class TestPending(TestEvent):
    kind: ClassVar[str] = "test_pending"


@dataclass(frozen=True, kw_only=True)
class InfoProvided(Event):
    kind: ClassVar[str] = "info_provided"

    message: str
    suite_name: str | None = None
    suite_class: str | None = None
    test_name: str | None = None
    indent: int = 0


@dataclass(frozen=True, kw_only=True)
class ScopeOpened(Event):
    kind: ClassVar[str] = "scope_opened"

    message: str
    suite_name: str
    suite_class: str | None = None
    indent: int = 0


@dataclass(frozen=True, kw_only=True)
class ScopeClosed(Event):
    kind: ClassVar[str] = "scope_closed"

    message: str
    suite_name: str
    suite_class: str | None = None
    indent: int = 0


@dataclass(frozen=True, kw_only=True)
class SuiteStarting(Event):
    kind: ClassVar[str] = "suite_starting"

    suite_name: str
    suite_class: str | None = None
    rerunner: Rerunner | None = field(default=None, compare=False)


@dataclass(frozen=True, kw_only=True)
class SuiteCompleted(Event):
    kind: ClassVar[str] = "suite_completed"

    suite_name: str
    suite_class: str | None = None
    duration: float | None = None
    rerunner: Rerunner | None = field(default=None, compare=False)


@dataclass(frozen=True, kw_only=True)
class SuiteAborted(Event):
    kind: ClassVar[str] = "suite_aborted"

    suite_name: str
    suite_class: str | None = None
    message: str
    cause: BaseException | None = field(default=None, compare=False)
    duration: float | None = None
    rerunner: Rerunner | None = field(default=None, compare=False)


@dataclass(frozen=True, kw_only=True)
class RunStarting(Event):
    kind: ClassVar[str] = "run_starting"

    expected_test_count: int


@dataclass(frozen=True, kw_only=True)
class RunCompleted(Event):
    kind: ClassVar[str] = "run_completed"

    duration: float | None = None
    summary: Summary | None = None


@dataclass(frozen=True, kw_only=True)
class RunStopped(Event):
    kind: ClassVar[str] = "run_stopped"

    duration: float | None = None
    summary: Summary | None = None


@dataclass(frozen=True, kw_only=True)
class RunAborted(Event):
    kind: ClassVar[str] = "run_aborted"

    message: str
    cause: BaseException | None = field(default=None, compare=False)
    duration: float | None = None
    summary: Summary | None = None

"""Reporters: consumers of report events."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import IO, Protocol, TypeVar

import click

from specsuite import events
from specsuite.models import Summary

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=events.Event)


class Reporter(Protocol):
    def __call__(self, event: events.Event) -> None: ...


class CatchReporter:
    """Wraps a reporter so its exceptions are logged instead of propagated."""

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter

    def __call__(self, event: events.Event) -> None:
        try:
            self.reporter(event)
        except Exception:
            logger.exception("Reporter %r raised while handling %s", self.reporter, event.kind)


def wrap_reporter(reporter: Reporter) -> Reporter:
    """Wrap ``reporter`` in a CatchReporter unless it already catches."""
    if isinstance(reporter, (CatchReporter, DispatchReporter)):
        return reporter
    return CatchReporter(reporter)


class DispatchReporter:
    """Forwards each event to several reporters, one event at a time.

    Delivery is serialized so reporters never see events interleaved from
    suites running on different threads.
    """

    def __init__(self, reporters: Iterable[Reporter]) -> None:
        self.reporters = [CatchReporter(r) for r in reporters]
        self._lock = threading.Lock()

    def __call__(self, event: events.Event) -> None:
        with self._lock:
            for reporter in self.reporters:
                reporter(event)


class RecordingReporter:
    """Keeps every event it receives, in arrival order."""

    def __init__(self) -> None:
        self._events: list[events.Event] = []
        self._lock = threading.Lock()

    def __call__(self, event: events.Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[events.Event]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def test_names(self, event_type: type[events.TestEvent]) -> list[str]:
        return [e.test_name for e in self.of_type(event_type)]


class SummaryReporter:
    """Counts terminal test events and suite outcomes into a Summary."""

    def __init__(self) -> None:
        self.summary = Summary()
        self._lock = threading.Lock()

    def __call__(self, event: events.Event) -> None:
        with self._lock:
            if isinstance(event, events.TestSucceeded):
                self.summary.succeeded += 1
            elif isinstance(event, events.TestFailed):
                self.summary.failed += 1
            elif isinstance(event, events.TestIgnored):
                self.summary.ignored += 1
            elif isinstance(event, events.TestPending):
                self.summary.pending += 1
            elif isinstance(event, events.SuiteCompleted):
                self.summary.suites_completed += 1
            elif isinstance(event, events.SuiteAborted):
                self.summary.suites_aborted += 1


_STYLES: dict[str, dict[str, object]] = {
    "test_succeeded": {"fg": "green"},
    "test_failed": {"fg": "red", "bold": True},
    "test_ignored": {"fg": "yellow"},
    "test_pending": {"fg": "yellow"},
    "suite_aborted": {"fg": "red", "bold": True},
    "run_aborted": {"fg": "red", "bold": True},
}


class ConsoleReporter:
    """Prints an indented, optionally colored transcript of a run."""

    def __init__(
        self,
        color: bool = True,
        file: IO[str] | None = None,
        show_durations: bool = False,
        echo: Callable[..., None] = click.echo,
    ) -> None:
        self.color = color
        self.file = file
        self.show_durations = show_durations
        self._echo = echo

    def _line(self, text: str, indent: int, kind: str) -> None:
        line = "  " * indent + text
        if self.color and kind in _STYLES:
            line = click.style(line, **_STYLES[kind])  # type: ignore[arg-type]
        self._echo(line, file=self.file, color=self.color)

    def _duration(self, duration: float | None) -> str:
        if not self.show_durations or duration is None:
            return ""
        return f" ({duration * 1000:.0f} ms)"

    def __call__(self, event: events.Event) -> None:
        if isinstance(event, events.RunStarting):
            self._line(f"Run starting. Expected test count is: {event.expected_test_count}", 0, event.kind)
        elif isinstance(event, events.SuiteStarting):
            self._line(f"{event.suite_name}:", 0, event.kind)
        elif isinstance(event, events.SuiteAborted):
            self._line(f"*** SUITE ABORTED *** {event.suite_name}: {event.message}", 0, event.kind)
        elif isinstance(event, events.ScopeOpened):
            self._line(event.message, event.indent, event.kind)
        elif isinstance(event, events.TestSucceeded):
            self._line(f"- {event.test_text}{self._duration(event.duration)}", event.indent, event.kind)
        elif isinstance(event, events.TestFailed):
            self._line(
                f"- {event.test_text} *** FAILED ***{self._duration(event.duration)}",
                event.indent,
                event.kind,
            )
            self._line(event.message, event.indent + 2, event.kind)
        elif isinstance(event, events.TestIgnored):
            self._line(f"- {event.test_text} !!! IGNORED !!!", event.indent, event.kind)
        elif isinstance(event, events.TestPending):
            self._line(f"- {event.test_text} (pending)", event.indent, event.kind)
        elif isinstance(event, events.InfoProvided):
            self._line(f"+ {event.message}", event.indent, event.kind)
        elif isinstance(event, (events.RunCompleted, events.RunStopped, events.RunAborted)):
            if isinstance(event, events.RunStopped):
                self._line("Run stopped.", 0, event.kind)
            elif isinstance(event, events.RunAborted):
                self._line(f"*** RUN ABORTED *** {event.message}", 0, event.kind)
            else:
                self._line(f"Run completed{self._duration(event.duration)}.", 0, event.kind)
            if event.summary is not None:
                s = event.summary
                self._line(
                    f"Tests: succeeded {s.succeeded}, failed {s.failed}, "
                    f"ignored {s.ignored}, pending {s.pending}",
                    0,
                    event.kind,
                )
                self._line(
                    f"Suites: completed {s.suites_completed}, aborted {s.suites_aborted}",
                    0,
                    event.kind,
                )

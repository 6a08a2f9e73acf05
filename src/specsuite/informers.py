"""Informers: the ``info`` callable handed to suites and test bodies.

Which informer is live depends on the suite's lifecycle phase:

* during construction, messages become info leaves in the test tree;
* while a suite runs but outside any test, messages are reported at once;
* inside a test, messages are recorded and reported after the test's
  terminal event, so renderers can place them under the final status line;
* after a run, calling ``info`` raises ``IllegalStateError``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol

from specsuite.errors import IllegalStateError, InvalidArgumentError


class Informer(Protocol):
    def __call__(self, message: str) -> None: ...


def _check_message(message: object) -> str:
    if message is None:
        raise InvalidArgumentError("info message was None")
    return str(message)


class RegistrationInformer:
    """Records messages into the test tree while the suite is constructed."""

    def __init__(self, record: Callable[[str], None]) -> None:
        self._record = record

    def __call__(self, message: str) -> None:
        self._record(_check_message(message))


class ReportingInformer:
    """Reports every message immediately."""

    def __init__(self, report: Callable[[str], None]) -> None:
        self._report = report

    def __call__(self, message: str) -> None:
        self._report(_check_message(message))


class RecordingInformer:
    """Buffers messages sent from the thread running a test.

    Messages from any other thread are forwarded immediately, since the test
    may already have finished by the time they arrive.
    """

    def __init__(self, forward: Callable[[str], None]) -> None:
        self._forward = forward
        self._thread = threading.current_thread()
        self._messages: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, message: str) -> None:
        text = _check_message(message)
        if threading.current_thread() is self._thread:
            with self._lock:
                self._messages.append(text)
        else:
            self._forward(text)

    @property
    def messages(self) -> list[str]:
        with self._lock:
            return list(self._messages)

    def flush(self) -> None:
        """Forward and clear all buffered messages, oldest first."""
        with self._lock:
            pending, self._messages = self._messages, []
        for text in pending:
            self._forward(text)


class ZombieInformer:
    """Refuses all messages; installed once a run has finished."""

    def __init__(self, suite_name: str) -> None:
        self._complaint = (
            f"Sorry, you can only use {suite_name}'s info while it is being "
            "constructed or run."
        )

    def __call__(self, message: str) -> None:
        _check_message(message)
        raise IllegalStateError(self._complaint)

"""Assertion helpers for test bodies.

Plain ``assert`` works too; any exception a test body raises fails the test.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NoReturn, TypeVar

from specsuite.errors import TestFailedError, TestPendingError

X = TypeVar("X", bound=BaseException)


def fail(message: str = "test failed") -> NoReturn:
    raise TestFailedError(message)


def pending() -> NoReturn:
    """Mark the running test as pending. Also usable as ``body=pending``."""
    raise TestPendingError()


def expect(expected: Any, actual: Any, clue: str | None = None) -> None:
    """Fail unless ``actual == expected``."""
    if actual != expected:
        message = f"Expected {expected!r}, but got {actual!r}"
        if clue:
            message = f"{clue}: {message}"
        raise TestFailedError(message)


def intercept(expected: type[X], fn: Callable[..., Any], *args: Any, **kwargs: Any) -> X:
    """Call ``fn`` and return the ``expected`` exception it raises.

    Fails the test if ``fn`` returns normally or raises something else.
    """
    try:
        fn(*args, **kwargs)
    except expected as exc:
        return exc
    except Exception as exc:
        raise TestFailedError(
            f"Expected exception {expected.__name__} to be thrown, "
            f"but {type(exc).__name__} was thrown"
        ) from exc
    raise TestFailedError(
        f"Expected exception {expected.__name__} to be thrown, but no exception was thrown"
    )

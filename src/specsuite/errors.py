"""Exception taxonomy for specsuite."""

from __future__ import annotations


class SpecSuiteError(Exception):
    """Base class for all errors raised by specsuite."""


class RegistrationClosedError(SpecSuiteError):
    """Raised when a test or scope is registered after the suite started running."""


class DuplicateTestNameError(SpecSuiteError):
    """Raised when two tests resolve to the same name."""

    def __init__(self, test_name: str) -> None:
        super().__init__(f"Duplicate test name: {test_name}")
        self.test_name = test_name


class NotAllowedError(SpecSuiteError):
    """Raised when a style-specific structural rule is violated."""


class NoSuchTestError(SpecSuiteError, KeyError):
    """Raised when a test is requested by a name that was never registered."""

    def __init__(self, test_name: str) -> None:
        super().__init__(test_name)
        self.test_name = test_name

    def __str__(self) -> str:
        return f'No test in this suite has name: "{self.test_name}"'


class InvalidArgumentError(SpecSuiteError, ValueError):
    """Raised when a registration call receives an unusable argument."""


class IllegalStateError(SpecSuiteError, RuntimeError):
    """Raised when an informer is used outside any valid context."""


class ConcurrentModificationError(SpecSuiteError, RuntimeError):
    """Raised when registration state was replaced by another thread mid-update."""


class TestPendingError(SpecSuiteError):
    """Signals that a test is intentionally not yet implemented."""

    __test__ = False

    def __init__(self, message: str = "pending") -> None:
        super().__init__(message)


class TestFailedError(SpecSuiteError, AssertionError):
    """Raised by the assertion helpers when a check does not hold."""

    __test__ = False


class ConfigError(SpecSuiteError):
    """Raised when the run configuration file cannot be used."""


class SuiteLoadError(SpecSuiteError):
    """Raised when a suite reference cannot be imported or instantiated."""

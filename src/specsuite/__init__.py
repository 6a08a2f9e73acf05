"""specsuite: behavior-driven test suites with nested, named, tagged tests."""

__version__ = "0.1.0"

from specsuite.assertions import expect, fail, intercept, pending
from specsuite.errors import (
    DuplicateTestNameError,
    NoSuchTestError,
    NotAllowedError,
    RegistrationClosedError,
    SpecSuiteError,
    TestFailedError,
    TestPendingError,
)
from specsuite.fixtures import BeforeAndAfter, OneInstancePerTest
from specsuite.models import IGNORE_TAG, Tag
from specsuite.shared import SharedBehavior
from specsuite.styles import (
    FeatureSpec,
    FlatSpec,
    FunSpec,
    FunSuite,
    MethodSuite,
    WordSpec,
    ignored,
    tagged,
)
from specsuite.suite import FlagStopper, Suite, Suites

__all__ = [
    "IGNORE_TAG",
    "BeforeAndAfter",
    "DuplicateTestNameError",
    "FeatureSpec",
    "FlagStopper",
    "FlatSpec",
    "FunSpec",
    "FunSuite",
    "MethodSuite",
    "NoSuchTestError",
    "NotAllowedError",
    "OneInstancePerTest",
    "RegistrationClosedError",
    "SharedBehavior",
    "SpecSuiteError",
    "Suite",
    "Suites",
    "Tag",
    "TestFailedError",
    "TestPendingError",
    "WordSpec",
    "expect",
    "fail",
    "ignored",
    "intercept",
    "pending",
    "tagged",
]

"""Unit tests for specsuite.suite."""

import pytest

from specsuite import events
from specsuite.errors import (
    IllegalStateError,
    NoSuchTestError,
    NotAllowedError,
    RegistrationClosedError,
)
from specsuite.models import IGNORE_TAG, NoArgTest, OneArgTest
from specsuite.reporters import RecordingReporter
from specsuite.styles import FunSuite
from specsuite.suite import FlagStopper, Suite, Suites, never_stop


class Talkative(FunSuite):
    def __init__(self) -> None:
        super().__init__()
        self.info("constructed")

        @self.test("speaks")
        def _() -> None:
            self.info("inside the test")


class WithFixture(FunSuite):
    def __init__(self) -> None:
        super().__init__()
        self.received: list[object] = []

        @self.test("gets a fixture")
        def _(fixture: str) -> None:
            self.received.append(fixture)

    def with_fixture(self, test):
        if isinstance(test, OneArgTest):
            return test("the fixture")
        return super().with_fixture(test)


class TestSuiteSurface:
    def test_names_and_tags(self, mixed_suite) -> None:
        assert mixed_suite.test_names == ["passes", "fails", "is pending", "is ignored"]
        assert mixed_suite.tags == {
            "passes": frozenset({"fast"}),
            "fails": frozenset({"slow"}),
            "is ignored": frozenset({"fast", IGNORE_TAG}),
        }

    def test_suite_name_and_class(self, mixed_suite) -> None:
        assert mixed_suite.suite_name == "MixedOutcomes"
        assert mixed_suite.suite_class.endswith("conftest.MixedOutcomes")

    def test_expected_test_count(self, mixed_suite) -> None:
        assert mixed_suite.expected_test_count() == 3
        assert mixed_suite.expected_test_count(include=["fast"]) == 1
        assert mixed_suite.expected_test_count(exclude="slow") == 2

    def test_empty_suite(self, recorder: RecordingReporter) -> None:
        suite = Suite()
        suite.run(reporter=recorder)
        assert suite.test_names == []
        assert recorder.events == []


class TestRun:
    def test_returns_normally_despite_failures(self, mixed_suite, recorder: RecordingReporter) -> None:
        assert mixed_suite.run(reporter=recorder) is None
        assert recorder.test_names(events.TestSucceeded) == ["passes"]
        assert recorder.test_names(events.TestFailed) == ["fails"]
        assert recorder.test_names(events.TestPending) == ["is pending"]
        assert recorder.test_names(events.TestIgnored) == ["is ignored"]
        assert mixed_suite.ran == ["passes", "fails", "is pending"]

    def test_failure_message(self, mixed_suite, recorder: RecordingReporter) -> None:
        mixed_suite.run(reporter=recorder)
        (failed,) = recorder.of_type(events.TestFailed)
        assert "one is not two" in failed.message

    def test_tag_filters(self, mixed_suite, recorder: RecordingReporter) -> None:
        mixed_suite.run(reporter=recorder, include=["fast"])
        assert recorder.test_names(events.TestSucceeded) == ["passes"]
        assert recorder.test_names(events.TestIgnored) == ["is ignored"]
        assert mixed_suite.ran == ["passes"]

    def test_single_string_tag(self, mixed_suite, recorder: RecordingReporter) -> None:
        mixed_suite.run(reporter=recorder, exclude="slow")
        assert "fails" not in mixed_suite.ran

    def test_explicit_name_runs_ignored_test(self, mixed_suite, recorder: RecordingReporter) -> None:
        mixed_suite.run("is ignored", reporter=recorder)
        assert mixed_suite.ran == ["is ignored"]
        assert recorder.kinds() == ["test_starting", "test_succeeded"]

    def test_unknown_name(self, mixed_suite) -> None:
        with pytest.raises(NoSuchTestError):
            mixed_suite.run("no such test")

    def test_registration_closed_after_run(self, mixed_suite) -> None:
        mixed_suite.run()
        with pytest.raises(RegistrationClosedError):
            mixed_suite.test("too late", body=lambda: None)

    def test_registering_inside_a_test_fails_that_test(self, recorder: RecordingReporter) -> None:
        class Nested(FunSuite):
            def __init__(self) -> None:
                super().__init__()

                @self.test("outer")
                def _() -> None:
                    self.test("inner", body=lambda: None)

        Nested().run(reporter=recorder)
        (failed,) = recorder.of_type(events.TestFailed)
        assert isinstance(failed.cause, RegistrationClosedError)

    def test_stopper(self, mixed_suite, recorder: RecordingReporter) -> None:
        stopper = FlagStopper()
        mixed_suite.run(reporter=recorder, stopper=stopper)
        assert len(mixed_suite.ran) == 3

        suite = type(mixed_suite)()
        stopper = FlagStopper()
        stopper.request_stop()
        suite.run(reporter=recorder, stopper=stopper)
        assert suite.ran == []

    def test_never_stop(self) -> None:
        assert never_stop() is False

    def test_ordinals_strictly_increase(self, stack_spec, recorder: RecordingReporter) -> None:
        stack_spec.run(reporter=recorder)
        ordinals = [e.ordinal for e in recorder.events]
        assert ordinals == sorted(ordinals)
        assert len(set(ordinals)) == len(ordinals)

    def test_reporter_errors_do_not_break_run(self, mixed_suite) -> None:
        def broken(event: events.Event) -> None:
            raise RuntimeError("reporter broke")

        mixed_suite.run(reporter=broken)
        assert mixed_suite.ran == ["passes", "fails", "is pending"]


class TestInfo:
    def test_construction_info_reported_in_tree(self, recorder: RecordingReporter) -> None:
        Talkative().run(reporter=recorder)
        assert recorder.kinds() == [
            "info_provided",
            "test_starting",
            "test_succeeded",
            "info_provided",
        ]
        first, second = recorder.of_type(events.InfoProvided)
        assert first.message == "constructed"
        assert first.test_name is None
        assert second.message == "inside the test"
        assert second.test_name == "speaks"

    def test_info_after_run_raises(self) -> None:
        suite = Talkative()
        suite.run()
        with pytest.raises(IllegalStateError):
            suite.info("too late")

    def test_info_outside_tests_is_immediate(self, recorder: RecordingReporter) -> None:
        class Hooked(FunSuite):
            def run_tests(self, *args, **kwargs) -> None:
                self.info("starting tests")
                super().run_tests(*args, **kwargs)

        Hooked().run(reporter=recorder)
        (info,) = recorder.of_type(events.InfoProvided)
        assert info.message == "starting tests"
        assert info.indent == 1


class TestFixtures:
    def test_default_rejects_fixture_tests(self, recorder: RecordingReporter) -> None:
        class NeedsFixture(FunSuite):
            def __init__(self) -> None:
                super().__init__()
                self.test("wants one", body=lambda fixture: None)

        NeedsFixture().run(reporter=recorder)
        (failed,) = recorder.of_type(events.TestFailed)
        assert isinstance(failed.cause, NotAllowedError)

    def test_override_supplies_fixture(self, recorder: RecordingReporter) -> None:
        suite = WithFixture()
        suite.run(reporter=recorder)
        assert suite.received == ["the fixture"]
        assert recorder.test_names(events.TestSucceeded) == ["gets a fixture"]

    def test_config_map_reaches_fixture(self) -> None:
        seen: list[object] = []

        class Configured(FunSuite):
            def __init__(self) -> None:
                super().__init__()
                self.test("reads config", body=lambda: None)

            def with_fixture(self, test: NoArgTest):
                seen.append(test.config_map.get("db"))
                return test()

        Configured().run(config_map={"db": "sqlite"})
        assert seen == ["sqlite"]


class TestNestedSuites:
    def test_run_in_order_with_suite_events(self, recorder: RecordingReporter) -> None:
        outer = Suites(Talkative(), WithFixture(), name="All")
        outer.run(reporter=recorder)
        starts = recorder.of_type(events.SuiteStarting)
        assert [s.suite_name for s in starts] == ["Talkative", "WithFixture"]
        assert len(recorder.of_type(events.SuiteCompleted)) == 2
        assert outer.suite_name == "All"

    def test_expected_count_includes_nested(self, mixed_suite) -> None:
        assert Suites(mixed_suite, Talkative()).expected_test_count() == 4

    def test_nested_suites_skipped_for_explicit_name(self, recorder: RecordingReporter) -> None:
        class Parent(FunSuite):
            def __init__(self) -> None:
                super().__init__()
                self.child = Talkative()
                self.test("own", body=lambda: None)

            @property
            def nested_suites(self):
                return [self.child]

        Parent().run("own", reporter=recorder)
        assert recorder.of_type(events.SuiteStarting) == []

    def test_nested_abort_does_not_stop_parent(self, recorder: RecordingReporter) -> None:
        class Broken(FunSuite):
            def run_tests(self, *args, **kwargs) -> None:
                raise ValueError("setup failed")

        Suites(Broken(), Talkative()).run(reporter=recorder)
        (aborted,) = recorder.of_type(events.SuiteAborted)
        assert aborted.suite_name == "Broken"
        assert aborted.message == "setup failed"
        assert len(recorder.of_type(events.SuiteCompleted)) == 1

    def test_nested_aborting_condition_stops_run(self, recorder: RecordingReporter) -> None:
        class OutOfMemory(FunSuite):
            def __init__(self) -> None:
                super().__init__()

                @self.test("allocates")
                def _() -> None:
                    raise MemoryError()

        with pytest.raises(MemoryError):
            Suites(OutOfMemory(), Talkative()).run(reporter=recorder)
        assert [s.suite_name for s in recorder.of_type(events.SuiteStarting)] == ["OutOfMemory"]
        assert len(recorder.of_type(events.SuiteAborted)) == 1

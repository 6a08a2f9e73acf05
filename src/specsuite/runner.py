"""Suite discovery and whole-run execution with summary reporting."""

from __future__ import annotations

import importlib
import inspect
import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from specsuite import events
from specsuite.errors import SpecSuiteError, SuiteLoadError
from specsuite.executor import Stopper, failure_message, is_aborting
from specsuite.models import Summary, TagLike, tag_names
from specsuite.reporters import DispatchReporter, Reporter, SummaryReporter, wrap_reporter
from specsuite.suite import Suite, never_stop

logger = logging.getLogger(__name__)


def run_suite(
    suite: Suite,
    reporter: Reporter,
    test_name: str | None = None,
    stopper: Stopper | None = None,
    include: Iterable[TagLike] = (),
    exclude: Iterable[TagLike] = (),
    config_map: Mapping[str, Any] | None = None,
    distributor: Any = None,
    tracker: events.Tracker | None = None,
) -> bool:
    """Run one suite between SuiteStarting and SuiteCompleted/SuiteAborted events.

    Returns False if the suite aborted. Aborting conditions are still
    re-raised after the SuiteAborted event so the whole run stops.
    """
    report = wrap_reporter(reporter)
    tracker = tracker or events.Tracker()
    reference = suite.rerun_reference
    rerunner = events.Rerunner(reference) if reference is not None else None
    report(events.SuiteStarting(
        ordinal=tracker.next_ordinal(),
        suite_name=suite.suite_name,
        suite_class=suite.suite_class,
        rerunner=rerunner,
    ))
    start = time.monotonic()
    try:
        suite.run(
            test_name,
            report,
            stopper or never_stop,
            include,
            exclude,
            config_map,
            distributor,
            tracker,
        )
    except Exception as exc:
        logger.error("Suite %s aborted: %s", suite.suite_name, failure_message(exc))
        report(events.SuiteAborted(
            ordinal=tracker.next_ordinal(),
            suite_name=suite.suite_name,
            suite_class=suite.suite_class,
            message=failure_message(exc),
            cause=exc,
            duration=time.monotonic() - start,
            rerunner=rerunner,
        ))
        if is_aborting(exc):
            raise
        return False
    report(events.SuiteCompleted(
        ordinal=tracker.next_ordinal(),
        suite_name=suite.suite_name,
        suite_class=suite.suite_class,
        duration=time.monotonic() - start,
        rerunner=rerunner,
    ))
    return True


def run_suites(
    suites: Sequence[Suite],
    reporters: Iterable[Reporter],
    test_name: str | None = None,
    stopper: Stopper | None = None,
    include: Iterable[TagLike] = (),
    exclude: Iterable[TagLike] = (),
    config_map: Mapping[str, Any] | None = None,
    parallel: int = 0,
    run_stamp: int = 0,
) -> Summary:
    """Run several suites as one run and return its summary.

    With ``parallel`` > 0, whole suites are handed to a thread pool
    distributor; tests inside one suite always run sequentially. A named
    test always runs on the calling thread.
    """
    from specsuite.distributor import ThreadPoolDistributor

    counter = SummaryReporter()
    dispatch = DispatchReporter([*reporters, counter])
    stopper = stopper or never_stop
    include, exclude = tag_names(include), tag_names(exclude)
    tracker = events.Tracker(events.Ordinal(run_stamp))

    expected = (
        len(suites) if test_name is not None
        else sum(s.expected_test_count(include, exclude) for s in suites)
    )
    dispatch(events.RunStarting(ordinal=tracker.next_ordinal(), expected_test_count=expected))
    start = time.monotonic()
    try:
        if parallel > 0 and test_name is None:
            with ThreadPoolDistributor(
                dispatch, stopper, include, exclude, config_map, max_workers=parallel
            ) as distributor:
                for suite in suites:
                    if stopper():
                        break
                    distributor.put(suite, tracker.next_tracker())
        else:
            for suite in suites:
                if stopper():
                    break
                run_suite(
                    suite,
                    dispatch,
                    test_name=test_name,
                    stopper=stopper,
                    include=include,
                    exclude=exclude,
                    config_map=config_map,
                    tracker=tracker,
                )
    except Exception as exc:
        logger.error("Run aborted: %s", failure_message(exc))
        dispatch(events.RunAborted(
            ordinal=tracker.next_ordinal(),
            message=failure_message(exc),
            cause=exc,
            duration=time.monotonic() - start,
            summary=replace(counter.summary),
        ))
        return replace(counter.summary, suites_aborted=max(counter.summary.suites_aborted, 1))

    duration = time.monotonic() - start
    summary = replace(counter.summary)
    if stopper():
        dispatch(events.RunStopped(ordinal=tracker.next_ordinal(), duration=duration, summary=summary))
    else:
        dispatch(events.RunCompleted(ordinal=tracker.next_ordinal(), duration=duration, summary=summary))
    return summary


def rerun(
    reference: str,
    reporters: Iterable[Reporter],
    test_name: str | None = None,
    stopper: Stopper | None = None,
    include: Iterable[TagLike] = (),
    exclude: Iterable[TagLike] = (),
    config_map: Mapping[str, Any] | None = None,
) -> Summary:
    """Rebuild the suite named by ``reference`` and run it, or one of its tests.

    A suite that cannot be loaded is reported as ``RunAborted``.
    """
    try:
        suites = load_suites(reference)
    except SuiteLoadError as exc:
        logger.error("Rerun of %s aborted: %s", reference, exc)
        DispatchReporter(reporters)(events.RunAborted(
            ordinal=events.Tracker().next_ordinal(),
            message=str(exc),
            cause=exc,
        ))
        return Summary(suites_aborted=1)
    return run_suites(
        suites,
        reporters,
        test_name=test_name,
        stopper=stopper,
        include=include,
        exclude=exclude,
        config_map=config_map,
    )


def load_suites(reference: str) -> list[Suite]:
    """Import and instantiate the suites named by ``module:Class`` or ``module``.

    A bare module yields every Suite subclass defined in it, in definition
    order. Registration errors raised while a suite is constructed are
    reported as ``SuiteLoadError``.
    """
    module_name, _, attr = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SuiteLoadError(f"Cannot import {module_name!r}: {exc}") from exc

    if attr:
        target = getattr(module, attr, None)
        if not (inspect.isclass(target) and issubclass(target, Suite)):
            raise SuiteLoadError(f"{reference!r} is not a Suite class")
        classes: list[type[Suite]] = [target]
    else:
        classes = [
            obj for obj in vars(module).values()
            if inspect.isclass(obj)
            and issubclass(obj, Suite)
            and obj.__module__ == module.__name__
            and not obj.__name__.startswith("_")
        ]

    suites: list[Suite] = []
    for cls in classes:
        try:
            suites.append(cls())
        except SpecSuiteError as exc:
            raise SuiteLoadError(f"Cannot construct {cls.__name__}: {exc}") from exc
        except TypeError as exc:
            raise SuiteLoadError(
                f"Cannot construct {cls.__name__}: suites need a no-argument constructor ({exc})"
            ) from exc
    return suites

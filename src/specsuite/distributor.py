"""Distributors hand whole suites off to run elsewhere, typically in parallel."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Protocol

from specsuite import events
from specsuite.executor import Stopper
from specsuite.models import TagLike, tag_names
from specsuite.reporters import Reporter, wrap_reporter

if TYPE_CHECKING:
    from specsuite.suite import Suite

logger = logging.getLogger(__name__)


class Distributor(Protocol):
    def put(self, suite: Suite, tracker: events.Tracker) -> None: ...


class ThreadPoolDistributor:
    """Runs each suite put to it on a worker thread.

    Tests within one suite still run one after another; only suites run
    concurrently. Use as a context manager, or call ``wait`` to block
    until every suite has finished.
    """

    def __init__(
        self,
        reporter: Reporter,
        stopper: Stopper,
        include: Iterable[TagLike] = (),
        exclude: Iterable[TagLike] = (),
        config_map: Mapping[str, Any] | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.reporter = wrap_reporter(reporter)
        self.stopper = stopper
        self.include = tag_names(include)
        self.exclude = tag_names(exclude)
        self.config_map = dict(config_map or {})
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="specsuite")
        self._futures: list[Future[bool]] = []
        self._lock = threading.Lock()

    def put(self, suite: Suite, tracker: events.Tracker) -> None:
        from specsuite.runner import run_suite

        logger.debug("Distributing suite %s", suite.suite_name)
        future = self._pool.submit(
            run_suite,
            suite,
            self.reporter,
            stopper=self.stopper,
            include=self.include,
            exclude=self.exclude,
            config_map=self.config_map,
            distributor=self,
            tracker=tracker,
        )
        with self._lock:
            self._futures.append(future)

    def wait(self) -> None:
        """Block until all distributed suites, including nested ones, finish.

        The first error raised out of a suite (an aborting condition) is
        re-raised here once everything has settled.
        """
        first_error: BaseException | None = None
        while True:
            with self._lock:
                pending = [f for f in self._futures if not f.done()]
                if not pending:
                    done = list(self._futures)
                    break
            for future in pending:
                future.exception()
        for future in done:
            exc = future.exception()
            if exc is not None and first_error is None:
                first_error = exc
        if first_error is not None:
            raise first_error

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> ThreadPoolDistributor:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        try:
            if exc_type is None:
                self.wait()
        finally:
            self.shutdown()

"""Aggregated outcome of a run."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from tessel.description import Description
from tessel.notification import Failure, RunListener


@dataclass
class Result:
    """Summary of a complete run: counts, failures and elapsed time."""

    run_count: int = 0
    ignore_count: int = 0
    failures: list[Failure] = field(default_factory=list)
    run_time_ms: float = 0
    stopped_early: bool = False

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def was_successful(self) -> bool:
        return not self.failures

    def create_listener(self) -> RunListener:
        """Listener that fills in this result as events arrive."""
        return _ResultListener(self)


class _ResultListener(RunListener):
    def __init__(self, result: Result) -> None:
        self.result = result
        self._start = 0.0

    def test_run_started(self, description: Description) -> None:
        self._start = time.perf_counter()

    def test_run_finished(self, result: Result) -> None:
        self.result.run_time_ms = (time.perf_counter() - self._start) * 1000

    def test_finished(self, description: Description) -> None:
        self.result.run_count += 1

    def test_failure(self, failure: Failure) -> None:
        self.result.failures.append(failure)

    def test_ignored(self, description: Description) -> None:
        self.result.ignore_count += 1

"""Facade running requests and collecting their results."""

from __future__ import annotations

import logging

from tessel.errors import StoppedByUserError
from tessel.notification import RunListener, RunNotifier
from tessel.request import Request
from tessel.result import Result
from tessel.runners.base import Runner
from tessel.runners.builder import RunnerBuilder


logger = logging.getLogger(__name__)


class Core:
    """Runs tests and reports to registered listeners.

    Every run gets its own RunNotifier; the listeners registered here are
    attached to it for the duration of that run.

    Examples:
        result = Core.run_classes(CalculatorTest, ParserTest)

        core = Core()
        core.add_listener(ConsoleListener())
        result = core.run_request(Request.method(CalculatorTest, "adds"))
    """

    def __init__(self, *, builder: RunnerBuilder | None = None) -> None:
        self.builder = builder or RunnerBuilder()
        self._listeners: list[RunListener] = []
        self._notifier: RunNotifier | None = None

    def add_listener(self, listener: RunListener) -> None:
        if not any(existing is listener for existing in self._listeners):
            self._listeners.append(listener)

    def remove_listener(self, listener: RunListener) -> None:
        self._listeners = [existing for existing in self._listeners if existing is not listener]

    def run(self, *classes: type) -> Result:
        """Run all tests of ``classes``, in order."""
        return self.run_request(Request.classes(*classes, builder=self.builder))

    def run_request(self, request: Request) -> Result:
        return self.run_runner(request.get_runner())

    def run_runner(self, runner: Runner) -> Result:
        result = Result()
        notifier = RunNotifier()
        notifier.add_first_listener(result.create_listener())
        for listener in self._listeners:
            notifier.add_listener(listener)

        self._notifier = notifier
        try:
            notifier.fire_test_run_started(runner.description)
            try:
                runner.run(notifier)
            except StoppedByUserError as stop:
                logger.info("Run stopped: %s", stop)
            result.stopped_early = notifier.is_stopped
            notifier.fire_test_run_finished(result)
        finally:
            self._notifier = None
        return result

    def please_stop(self) -> None:
        """Stop the run in progress after the current test."""
        if self._notifier is not None:
            self._notifier.please_stop()

    @staticmethod
    def run_classes(*classes: type) -> Result:
        return Core().run(*classes)

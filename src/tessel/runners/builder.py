"""Chooses the runner for a test class."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tessel.discovery import TestClass
from tessel.errors import InitializationError
from tessel.runners.base import Runner
from tessel.runners.block import class_runner
from tessel.runners.reporting import ErrorReportingRunner, IgnoredClassRunner
from tessel.runners.suite import Suite


logger = logging.getLogger(__name__)


class RunnerBuilder:
    """Builds runners for classes, in this order of preference:

    1. ``@ignore`` on the class: a single ignored unit.
    2. ``@run_with(factory)``: ``factory(cls, builder)``.
    3. ``@suite_classes(...)``: a suite over the listed classes.
    4. The default class runner.

    A malformed class, or a runner factory that raises, becomes an
    ErrorReportingRunner, so it only fails its own subtree.
    """

    def __init__(self, *, default_timeout: float | None = None) -> None:
        self.default_timeout = default_timeout
        self._parents: list[type] = []

    def runner_for_class(self, cls: type) -> Runner:
        try:
            return self._build(cls)
        except InitializationError as error:
            logger.debug("Cannot build runner for %s: %s", cls.__qualname__, error)
            return ErrorReportingRunner(cls.__qualname__, error)
        except Exception as error:
            logger.warning("Runner for %s could not be built: %s", cls.__qualname__, error)
            return ErrorReportingRunner(cls.__qualname__, error)

    def runners(self, classes: Iterable[type]) -> list[Runner]:
        return [self.runner_for_class(cls) for cls in classes]

    def _build(self, cls: type) -> Runner:
        test_class = TestClass(cls)
        if test_class.is_ignored:
            return IgnoredClassRunner(cls)

        factory = test_class.runner_factory
        if factory is not None:
            logger.debug("Running %s with %s", test_class.name, getattr(factory, "__name__", factory))
            return factory(cls, self)

        members = test_class.suite_classes
        if members is not None:
            return self._suite_for(test_class, members)

        return class_runner(test_class, self)

    def _suite_for(self, test_class: TestClass, members: Iterable[type]) -> Suite:
        if test_class.cls in self._parents:
            msg = f"class '{test_class.name}' (possibly indirectly) contains itself as a SuiteClass"
            raise InitializationError([msg])
        self._parents.append(test_class.cls)
        try:
            children = self.runners(members)
        finally:
            self._parents.pop()
        return Suite(test_class.name, children, test_class=test_class)

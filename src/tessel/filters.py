"""Predicates pruning a runner's description tree before execution."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tessel.description import Description
from tessel.errors import NoTestsMatchedError
from tessel.runners.base import Runner, test_count
from tessel.runners.reporting import ErrorReportingRunner


class Filter(ABC):
    """Decides which tests run. Stateless across applications."""

    ALL: Filter

    @abstractmethod
    def should_run(self, description: Description) -> bool:
        """Whether the test (or any test under the suite) should run."""

    @abstractmethod
    def describe(self) -> str:
        """Short text used in reports, e.g. when nothing matched."""

    def prune(self, runner: Runner) -> Runner | None:
        """Copy of ``runner`` without rejected tests or empty composites, or None."""
        pruned = runner.filter(self)
        if pruned is None or test_count(pruned) == 0:
            return None
        return pruned

    def apply(self, runner: Runner) -> Runner:
        """Prune ``runner``.

        When no test remains the result is a single failing unit reporting
        NoTestsMatchedError, never an empty runner.
        """
        pruned = self.prune(runner)
        if pruned is None:
            return no_tests_matched(self, runner.description.display_name)
        return pruned

    def intersect(self, other: Filter) -> Filter:
        if other is Filter.ALL or other is self:
            return self
        if self is Filter.ALL:
            return other
        return _Intersection(self, other)

    def __str__(self) -> str:
        return self.describe()


class _All(Filter):
    def should_run(self, description: Description) -> bool:
        return True

    def describe(self) -> str:
        return "all tests"

    def prune(self, runner: Runner) -> Runner:
        return runner

    def apply(self, runner: Runner) -> Runner:
        return runner


Filter.ALL = _All()


def no_tests_matched(filter: Filter, source: object) -> ErrorReportingRunner:
    """Failing unit standing in for a run that ``filter`` emptied."""
    message = f"No tests found matching {filter.describe()} from {source}"
    return ErrorReportingRunner("Filter", NoTestsMatchedError(message))


class _Intersection(Filter):
    def __init__(self, first: Filter, second: Filter) -> None:
        self.first = first
        self.second = second

    def should_run(self, description: Description) -> bool:
        return self.first.should_run(description) and self.second.should_run(description)

    def describe(self) -> str:
        return f"{self.first.describe()} and {self.second.describe()}"


class MethodFilter(Filter):
    """Runs exactly one test, identified by its description."""

    def __init__(self, desired: Description) -> None:
        self.desired = desired

    def should_run(self, description: Description) -> bool:
        if description.is_test:
            return description == self.desired
        return any(self.should_run(child) for child in description.children)

    def describe(self) -> str:
        return f"Method {self.desired.display_name}"


class NameFilter(Filter):
    """Runs tests whose display name contains ``text``."""

    def __init__(self, text: str) -> None:
        self.text = text

    def should_run(self, description: Description) -> bool:
        if description.is_test:
            return self.text in description.display_name
        return any(self.should_run(child) for child in description.children)

    def describe(self) -> str:
        return f"Name containing {self.text}"

"""Requests describe what to run and produce the runner for it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from tessel.description import Description
from tessel.filters import Filter, MethodFilter, no_tests_matched
from tessel.runners.base import Runner
from tessel.runners.builder import RunnerBuilder
from tessel.runners.reporting import ErrorReportingRunner
from tessel.runners.suite import Suite


class Request(ABC):
    """An abstract description of tests to run."""

    @abstractmethod
    def get_runner(self) -> Runner:
        """Build the runner. Called once per run."""

    @staticmethod
    def a_class(cls: type, *, builder: RunnerBuilder | None = None) -> Request:
        return ClassRequest(cls, builder=builder)

    @staticmethod
    def classes(*classes: type, name: str = "All", builder: RunnerBuilder | None = None) -> Request:
        return ClassesRequest(classes, name=name, builder=builder)

    @staticmethod
    def method(cls: type, method_name: str, *, builder: RunnerBuilder | None = None) -> Request:
        desired = Description.create_test_description(
            cls.__qualname__,
            method_name,
            unique_id=(cls, method_name),
        )
        return Request.a_class(cls, builder=builder).filter_with(MethodFilter(desired))

    @staticmethod
    def runner(runner: Runner) -> Request:
        return RunnerRequest(runner)

    @staticmethod
    def error_report(name: str, error: BaseException) -> Request:
        return RunnerRequest(ErrorReportingRunner(name, error))

    def filter_with(self, filter: Filter | Description) -> Request:
        if isinstance(filter, Description):
            filter = MethodFilter(filter)
        return FilterRequest(self, filter)


class ClassRequest(Request):
    def __init__(self, cls: type, *, builder: RunnerBuilder | None = None) -> None:
        self.cls = cls
        self.builder = builder or RunnerBuilder()

    def get_runner(self) -> Runner:
        return self.builder.runner_for_class(self.cls)

    def __str__(self) -> str:
        return f"class {self.cls.__qualname__}"


class ClassesRequest(Request):
    def __init__(self, classes: Sequence[type], *, name: str = "All", builder: RunnerBuilder | None = None) -> None:
        self.classes = tuple(classes)
        self.name = name
        self.builder = builder or RunnerBuilder()

    def get_runner(self) -> Runner:
        return Suite(self.name, self.builder.runners(self.classes))

    def __str__(self) -> str:
        names = ", ".join(cls.__qualname__ for cls in self.classes)
        return f"classes [{names}]"


class RunnerRequest(Request):
    def __init__(self, runner: Runner) -> None:
        self._runner = runner

    def get_runner(self) -> Runner:
        return self._runner

    def __str__(self) -> str:
        return f"runner {self._runner.description.display_name}"


class FilterRequest(Request):
    """Applies a filter; a filter that leaves nothing is reported as a failure."""

    def __init__(self, request: Request, filter: Filter) -> None:
        self.request = request
        self.filter = filter

    def get_runner(self) -> Runner:
        runner = self.filter.prune(self.request.get_runner())
        if runner is None:
            return no_tests_matched(self.filter, self.request)
        return runner

    def __str__(self) -> str:
        return f"{self.request} filtered by {self.filter.describe()}"

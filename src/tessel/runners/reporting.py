"""Synthetic runners standing in for classes that cannot or must not run."""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

from tessel.description import Description
from tessel.notification import Failure, RunNotifier


if TYPE_CHECKING:
    from tessel.filters import Filter


class ErrorReportingRunner:
    """Reports one failing test carrying ``error`` in place of a broken subtree."""

    def __init__(self, name: str, error: BaseException) -> None:
        self.name = name
        self.error = error

    @cached_property
    def _test(self) -> Description:
        return Description.create_test_description(
            self.name,
            "initializationError",
            unique_id=(self.name, "initializationError", id(self)),
        )

    @cached_property
    def description(self) -> Description:
        return Description.create_suite_description(self.name, [self._test], unique_id=(self.name, id(self)))

    def run(self, notifier: RunNotifier) -> None:
        notifier.fire_test_started(self._test)
        notifier.fire_test_failure(Failure(self._test, self.error))
        notifier.fire_test_finished(self._test)

    def filter(self, filter: Filter) -> ErrorReportingRunner | None:
        return self if filter.should_run(self.description) else None

    def __repr__(self) -> str:
        return f"ErrorReportingRunner({self.name!r}, {self.error!r})"


class IgnoredClassRunner:
    """A class marked with ``@ignore``: a single ignored unit."""

    def __init__(self, cls: type) -> None:
        self.cls = cls

    @cached_property
    def description(self) -> Description:
        return Description(self.cls.__qualname__, unique_id=self.cls, is_test=True, class_name=self.cls.__qualname__)

    def run(self, notifier: RunNotifier) -> None:
        notifier.fire_test_ignored(self.description)

    def filter(self, filter: Filter) -> IgnoredClassRunner | None:
        return self if filter.should_run(self.description) else None

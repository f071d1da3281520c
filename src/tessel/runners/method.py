"""Leaf runner: one test method on one fresh instance."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

from tessel.description import Description
from tessel.discovery import FrameworkMethod, Tag, TestClass
from tessel.notification import Failure, RunNotifier
from tessel.rules.base import RuleBinding, apply_rules
from tessel.statements import (
    ExpectException,
    Fail,
    FailOnTimeout,
    InvokeMethod,
    RunAfters,
    RunBefores,
    Statement,
)


if TYPE_CHECKING:
    from tessel.filters import Filter


@dataclass
class MethodRunner:
    """Runs a single tagged test method.

    Attributes:
    ----------
    test_class : TestClass
        Model of the class declaring the method.
    method : FrameworkMethod
        The tagged test method.
    create_test : Callable
        Builds a fresh instance for every run.
    name_suffix : str
        Appended to the method name, e.g. ``"[1: fib(3)=2]"``.
    default_timeout : float | None
        Timeout used when the method does not declare one.
    """

    test_class: TestClass
    method: FrameworkMethod
    create_test: Callable[[], Any]
    name_suffix: str = ""
    default_timeout: float | None = None

    @cached_property
    def description(self) -> Description:
        name = f"{self.method.name}{self.name_suffix}"
        return Description.create_test_description(
            self.test_class.name,
            name,
            unique_id=(self.test_class.cls, name),
        )

    def run(self, notifier: RunNotifier) -> None:
        description = self.description
        if self.method.is_ignored:
            notifier.fire_test_ignored(description)
            return

        notifier.fire_test_started(description)
        try:
            self.method_block().evaluate()
        except Exception as error:
            notifier.fire_test_failure(Failure(description, error))
        finally:
            notifier.fire_test_finished(description)

    def filter(self, filter: Filter) -> MethodRunner | None:
        return self if filter.should_run(self.description) else None

    def method_block(self) -> Statement:
        """Build the statement chain for one execution of the method."""
        try:
            instance = self.create_test()
        except Exception as error:
            return Fail(error)

        statement: Statement = InvokeMethod(self.method, instance)
        statement = self._possibly_expecting_exceptions(statement)
        statement = self._with_potential_timeout(statement)
        statement = self._with_befores(statement, instance)
        statement = self._with_afters(statement, instance)
        statement = self._with_rules(statement, instance)
        return statement

    def _possibly_expecting_exceptions(self, statement: Statement) -> Statement:
        expected = self.method.test_options.expected
        if expected is None:
            return statement
        return ExpectException(statement, expected)

    def _with_potential_timeout(self, statement: Statement) -> Statement:
        timeout = self.method.test_options.timeout or self.default_timeout
        if not timeout:
            return statement
        return FailOnTimeout(statement, timeout)

    def _with_befores(self, statement: Statement, instance: Any) -> Statement:
        befores = self.test_class.annotated_methods(Tag.BEFORE)
        if not befores:
            return statement
        return RunBefores(statement, befores, instance)

    def _with_afters(self, statement: Statement, instance: Any) -> Statement:
        afters = self.test_class.annotated_methods(Tag.AFTER)
        if not afters:
            return statement
        return RunAfters(statement, afters, instance)

    def _with_rules(self, statement: Statement, instance: Any) -> Statement:
        description = self.description
        method_rules = [
            RuleBinding(method.invoke(instance), method.name, method.tags.get(Tag.RULE))
            for method in self.test_class.annotated_methods(Tag.RULE)
        ]
        statement = apply_rules(method_rules, statement, description)
        field_rules = [
            RuleBinding(getattr(instance, name), name, field.priority)
            for name, field in self.test_class.rule_fields()
        ]
        return apply_rules(field_rules, statement, description)

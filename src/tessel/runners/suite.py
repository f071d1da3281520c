"""Composite runner: an ordered group of child runners."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import TYPE_CHECKING, Any

from tessel.description import Description
from tessel.discovery import ClassRuleField, Tag, TestClass
from tessel.errors import StoppedByUserError
from tessel.notification import Failure, RunNotifier
from tessel.rules.base import RuleBinding, apply_rules
from tessel.runners.base import Runner
from tessel.statements import RunAfters, RunBefores, Statement


if TYPE_CHECKING:
    from tessel.filters import Filter


logger = logging.getLogger(__name__)


@dataclass
class RunChildren:
    """Runs each child in order, stopping early once the notifier is stopped."""

    children: Sequence[Runner]
    notifier: RunNotifier

    def evaluate(self) -> None:
        for child in self.children:
            if self.notifier.is_stopped:
                logger.info("Not starting %s: run was stopped", child.description.display_name)
                break
            child.run(self.notifier)


@dataclass
class ExposeClassRules:
    """Publishes the rules created for one class run on their fields while it runs."""

    next: Statement
    rules: Sequence[tuple[ClassRuleField, Any]]

    def evaluate(self) -> None:
        previous = [rule_field.current for rule_field, _ in self.rules]
        for rule_field, rule in self.rules:
            rule_field.current = rule
        try:
            self.next.evaluate()
        finally:
            for (rule_field, _), value in zip(self.rules, previous):
                rule_field.current = value


@dataclass
class Suite:
    """Runs children in declaration order inside optional class-level hooks.

    When ``test_class`` is set, its ``before_class``/``after_class`` hooks and
    class rules wrap the whole sequence of children, once.
    """

    name: str
    children: Sequence[Runner] = field(default_factory=list)
    test_class: TestClass | None = None

    @cached_property
    def description(self) -> Description:
        return Description.create_suite_description(
            self.name,
            [child.description for child in self.children],
            unique_id=self.test_class.cls if self.test_class else self.name,
            class_name=self.test_class.name if self.test_class else None,
        )

    def run(self, notifier: RunNotifier) -> None:
        try:
            self.class_block(notifier).evaluate()
        except StoppedByUserError:
            raise
        except Exception as error:
            notifier.fire_test_failure(Failure(self.description, error))

    def filter(self, filter: Filter) -> Suite | None:
        kept = [runner for runner in (child.filter(filter) for child in self.children) if runner is not None]
        if not kept:
            return None
        return replace(self, children=kept)

    def class_block(self, notifier: RunNotifier) -> Statement:
        """Statement running every child, wrapped in the class-level hooks."""
        statement: Statement = RunChildren(self.children, notifier)
        if self.test_class is None or not self.children:
            return statement

        owner = self.test_class.cls
        befores = self.test_class.annotated_methods(Tag.BEFORE_CLASS)
        if befores:
            statement = RunBefores(statement, befores, None, owner)
        afters = self.test_class.annotated_methods(Tag.AFTER_CLASS)
        if afters:
            statement = RunAfters(statement, afters, None, owner)
        created = [(name, rule_field, rule_field.create()) for name, rule_field in self.test_class.class_rule_fields()]
        if not created:
            return statement
        class_rules = [RuleBinding(rule, name, rule_field.priority) for name, rule_field, rule in created]
        statement = apply_rules(class_rules, statement, self.description)
        return ExposeClassRules(statement, [(rule_field, rule) for _, rule_field, rule in created])

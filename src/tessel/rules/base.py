"""Rules wrap a statement with setup and teardown."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from tessel.description import Description
from tessel.statements import Statement


logger = logging.getLogger(__name__)


@runtime_checkable
class TestRule(Protocol):
    """Turns a statement into a new statement that wraps it."""

    def apply(self, base: Statement, description: Description) -> Statement:
        ...


@dataclass(frozen=True)
class RuleBinding:
    """A rule together with the attribute or method that declared it."""

    rule: Any
    target: str
    priority: int | None = None


def sort_bindings(bindings: Iterable[RuleBinding]) -> list[RuleBinding]:
    """Declaration order, stable-sorted so that higher priorities come first (outermost)."""
    return sorted(bindings, key=lambda binding: -(binding.priority or 0))


def apply_rules(bindings: Iterable[RuleBinding], base: Statement, description: Description) -> Statement:
    """Fold rules around ``base``; the first binding ends up outermost."""
    statement = base
    for binding in reversed(sort_bindings(bindings)):
        if not isinstance(binding.rule, TestRule):
            msg = f"{binding.target} must be a rule with an apply() method, got {type(binding.rule).__name__}"
            raise TypeError(msg)
        statement = binding.rule.apply(statement, description)
    return statement


@dataclass
class _ResourceStatement:
    resource: ExternalResource
    base: Statement

    def evaluate(self) -> None:
        self.resource.before()
        try:
            self.base.evaluate()
        except BaseException as error:
            try:
                self.resource.after()
            except Exception as suppressed:
                logger.warning(
                    "Suppressed teardown failure in %s: %s",
                    type(self.resource).__name__,
                    suppressed,
                )
                error.add_note(f"Teardown also failed: {type(suppressed).__name__}: {suppressed}")
            raise
        self.resource.after()


class ExternalResource:
    """Base class for rules that acquire something before a test and release it after.

    Subclasses override ``before`` and ``after``. ``after`` runs whether or not
    the test failed, but not when ``before`` itself failed.
    """

    def apply(self, base: Statement, description: Description) -> Statement:
        return _ResourceStatement(self, base)

    def before(self) -> None:
        """Acquire the resource."""

    def after(self) -> None:
        """Release the resource."""

"""Statements: zero-argument actions composed into execution pipelines.

A statement either returns normally from ``evaluate()`` or raises exactly one
exception. Pipelines are built fresh for every run by wrapping statements in
other statements, so nothing here keeps state between runs.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from tessel.errors import TestTimedOutError, UnexpectedExceptionError, type_name


if TYPE_CHECKING:
    from tessel.discovery import FrameworkMethod


logger = logging.getLogger(__name__)


class Statement(Protocol):
    """An executable action that may fail."""

    def evaluate(self) -> None:
        """Run the action, raising on failure."""
        ...


def raise_first(errors: Sequence[BaseException]) -> None:
    """Raise the first collected error; later ones are attached as notes."""
    if not errors:
        return
    first = errors[0]
    for suppressed in errors[1:]:
        logger.warning("Suppressed %s: %s", type(suppressed).__name__, suppressed)
        first.add_note(f"Also failed: {type(suppressed).__name__}: {suppressed}")
    raise first


@dataclass
class FunctionStatement:
    """Adapts a plain callable to the statement protocol."""

    fn: Callable[[], Any]

    def evaluate(self) -> None:
        self.fn()


@dataclass
class Fail:
    """Statement that always raises the given error."""

    error: BaseException

    def evaluate(self) -> None:
        raise self.error


@dataclass
class InvokeMethod:
    """Invokes a tagged test method on an instance."""

    method: FrameworkMethod
    target: Any

    def evaluate(self) -> None:
        self.method.invoke(self.target)


@dataclass
class ExpectException:
    """Classifies the inner outcome against a declared exception type."""

    next: Statement
    expected: type[BaseException]

    def evaluate(self) -> None:
        try:
            self.next.evaluate()
        except Exception as error:
            if isinstance(error, self.expected):
                return
            raise UnexpectedExceptionError(self.expected, error) from error
        raise AssertionError(f"Expected exception: {type_name(self.expected)}")


@dataclass
class FailOnTimeout:
    """Fails when the inner statement does not finish within ``timeout`` seconds.

    The inner statement runs on a daemon worker thread. On expiry the worker
    is abandoned, not killed.
    """

    next: Statement
    timeout: float

    def evaluate(self) -> None:
        outcome: list[BaseException] = []

        def target() -> None:
            try:
                self.next.evaluate()
            except BaseException as error:  # noqa: BLE001 - handed back to the caller
                outcome.append(error)

        worker = threading.Thread(target=target, name="tessel-timeout", daemon=True)
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            raise TestTimedOutError(self.timeout)
        if outcome:
            raise outcome[0]


@dataclass
class RunBefores:
    """Runs setup hooks, then the inner statement. A failing hook stops everything."""

    next: Statement
    befores: Sequence[FrameworkMethod]
    target: Any
    owner: type | None = None

    def evaluate(self) -> None:
        for before in self.befores:
            before.invoke(self.target, owner=self.owner)
        self.next.evaluate()


@dataclass
class RunAfters:
    """Runs the inner statement, then every teardown hook. First failure wins."""

    next: Statement
    afters: Sequence[FrameworkMethod]
    target: Any
    owner: type | None = None

    def evaluate(self) -> None:
        errors: list[BaseException] = []
        try:
            self.next.evaluate()
        except Exception as error:
            errors.append(error)
        finally:
            for after in self.afters:
                try:
                    after.invoke(self.target, owner=self.owner)
                except Exception as error:
                    errors.append(error)
        raise_first(errors)

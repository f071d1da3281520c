"""Parameterized classes: one child suite per tuple of a static data source.

Example:
    @run_with(Parameterized)
    class FibonacciTest:
        @parameters(name="{index}: fib({0})={1}")
        @staticmethod
        def data():
            return [(0, 0), (1, 1), (2, 1), (3, 2)]

        def __init__(self, given, expected):
            self.given = given
            self.expected = expected

        @test
        def computes(self):
            assert fib(self.given) == self.expected

Children are named ``[0: fib(0)=0]``, ``[1: fib(1)=1]`` and so on.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from functools import cached_property
from typing import TYPE_CHECKING, Any

from tessel.description import Description
from tessel.discovery import FrameworkMethod, ParametersOptions, Tag, TestClass
from tessel.errors import InitializationError
from tessel.notification import RunNotifier
from tessel.runners.base import Runner
from tessel.runners.block import method_runners, validate
from tessel.runners.reporting import ErrorReportingRunner
from tessel.runners.suite import Suite


if TYPE_CHECKING:
    from tessel.filters import Filter
    from tessel.runners.builder import RunnerBuilder


logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def _format_value(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return str(value)
    # Integers get locale grouping; floats print every digit.
    if isinstance(value, int):
        return format(value, "n")
    return str(value)


def name_for(pattern: str, index: int, parameters: Sequence[Any]) -> str:
    """Bracketed display name for the tuple at ``index``.

    ``{index}`` becomes the index; ``{0}``, ``{1}``, ... become the formatted
    elements. Placeholders past the end of the tuple are left untouched.
    """
    pattern = pattern.replace("{index}", str(index))

    def substitute(match: re.Match[str]) -> str:
        position = int(match.group(1))
        if position >= len(parameters):
            return match.group(0)
        return _format_value(parameters[position])

    return f"[{_PLACEHOLDER.sub(substitute, pattern)}]"


class Parameterized:
    """Runner expanding a class over the tuples returned by its ``@parameters`` method.

    The data source is read on first access to ``description`` or ``children``.
    Problems with the data are reported as an initialization failure of the
    class rather than raised.
    """

    def __init__(self, cls: type | TestClass, builder: RunnerBuilder | None = None) -> None:
        self.test_class = cls if isinstance(cls, TestClass) else TestClass(cls)
        self.default_timeout = builder.default_timeout if builder else None
        self.parameters_method = self._find_parameters_method()
        validate(self.test_class, check_constructor=False)

    def _find_parameters_method(self) -> FrameworkMethod:
        candidates = [
            method
            for method in self.test_class.annotated_methods(Tag.PARAMETERS)
            if method.is_static and method.is_public
        ]
        if not candidates:
            msg = f"No public static parameters method on class {self.test_class.name}"
            raise InitializationError([msg])
        if len(candidates) > 1:
            names = ", ".join(method.name for method in candidates)
            msg = f"Class {self.test_class.name} has more than one public static parameters method: {names}"
            raise InitializationError([msg])
        return candidates[0]

    def _wrong_type(self) -> InitializationError:
        return InitializationError(
            [f"{self.test_class.name}.{self.parameters_method.name}() must return an Iterable of arrays."]
        )

    def _all_parameters(self) -> Iterable[Any]:
        try:
            parameters = self.parameters_method.invoke(None, owner=self.test_class.cls)
        except Exception as error:
            raise InitializationError([error]) from error
        if isinstance(parameters, (str, bytes)) or not isinstance(parameters, Iterable):
            raise self._wrong_type()
        return parameters

    def _create_runners(self) -> list[Runner]:
        options: ParametersOptions = self.parameters_method.tags[Tag.PARAMETERS]
        runners: list[Runner] = []
        try:
            for index, entry in enumerate(self._all_parameters()):
                if not isinstance(entry, (tuple, list)):
                    raise self._wrong_type()
                name = name_for(options.name, index, entry)
                logger.debug("Expanding %s with %s", self.test_class.name, name)
                runners.append(
                    Suite(
                        name,
                        method_runners(
                            self.test_class,
                            *entry,
                            name_suffix=name,
                            default_timeout=self.default_timeout,
                        ),
                    )
                )
        except InitializationError:
            raise
        except Exception as error:
            raise InitializationError([error]) from error
        return runners

    @cached_property
    def children(self) -> list[Runner]:
        try:
            return self._create_runners()
        except InitializationError as error:
            return [ErrorReportingRunner(self.test_class.name, error)]

    @cached_property
    def _suite(self) -> Suite:
        return Suite(self.test_class.name, self.children, test_class=self.test_class)

    @property
    def description(self) -> Description:
        return self._suite.description

    def run(self, notifier: RunNotifier) -> None:
        self._suite.run(notifier)

    def filter(self, filter: Filter) -> Suite | None:
        return self._suite.filter(filter)

"""tessel - composable test orchestration: rules, runners and run notifications."""

from .core import Core
from .description import Description
from .discovery import (
    TestClass,
    after,
    after_class,
    before,
    before_class,
    class_rule,
    ignore,
    parameters,
    rule,
    rule_method,
    run_with,
    suite_classes,
    test,
)
from .errors import (
    InitializationError,
    NoTestsMatchedError,
    StoppedByUserError,
    TestTimedOutError,
    UnexpectedExceptionError,
)
from .filters import Filter, MethodFilter, NameFilter
from .notification import Failure, RunListener, RunNotifier
from .request import Request
from .result import Result
from .rules import ExternalResource, TemporaryFolder, TestRule, Timeout
from .runners import Parameterized, RunnerBuilder, Suite, class_runner
from .version import __version__


__all__ = [
    # Declaring tests
    "test",
    "before",
    "after",
    "before_class",
    "after_class",
    "ignore",
    "parameters",
    "rule",
    "rule_method",
    "class_rule",
    "run_with",
    "suite_classes",
    "TestClass",
    # Rules
    "TestRule",
    "ExternalResource",
    "TemporaryFolder",
    "Timeout",
    # Running
    "Core",
    "Request",
    "Result",
    "RunnerBuilder",
    "Suite",
    "Parameterized",
    "class_runner",
    "Filter",
    "MethodFilter",
    "NameFilter",
    # Events
    "Description",
    "Failure",
    "RunListener",
    "RunNotifier",
    # Errors
    "InitializationError",
    "NoTestsMatchedError",
    "StoppedByUserError",
    "TestTimedOutError",
    "UnexpectedExceptionError",
    "__version__",
]

"""Runners turn description trees into statement trees and execute them."""

from tessel.runners.base import Runner, test_count
from tessel.runners.block import class_runner, validate
from tessel.runners.builder import RunnerBuilder
from tessel.runners.method import MethodRunner
from tessel.runners.parameterized import Parameterized, name_for
from tessel.runners.reporting import ErrorReportingRunner, IgnoredClassRunner
from tessel.runners.suite import RunChildren, Suite


__all__ = [
    "ErrorReportingRunner",
    "IgnoredClassRunner",
    "MethodRunner",
    "Parameterized",
    "RunChildren",
    "Runner",
    "RunnerBuilder",
    "Suite",
    "class_runner",
    "name_for",
    "test_count",
    "validate",
]

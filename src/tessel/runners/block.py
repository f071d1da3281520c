"""Default runner for a plain test class: one leaf per test method."""

from __future__ import annotations

import inspect
from functools import partial
from typing import TYPE_CHECKING, Any

from tessel.discovery import Tag, TestClass
from tessel.errors import InitializationError
from tessel.runners.method import MethodRunner
from tessel.runners.suite import Suite


if TYPE_CHECKING:
    from tessel.runners.builder import RunnerBuilder


def validate_methods(test_class: TestClass, errors: list[Exception]) -> None:
    """Check the shape of every hook and test method."""
    for method in test_class.annotated_methods(Tag.BEFORE_CLASS):
        method.validate_public_void_no_arg(True, errors)
    for method in test_class.annotated_methods(Tag.AFTER_CLASS):
        method.validate_public_void_no_arg(True, errors)
    for method in test_class.annotated_methods(Tag.BEFORE):
        method.validate_public_void_no_arg(False, errors)
    for method in test_class.annotated_methods(Tag.AFTER):
        method.validate_public_void_no_arg(False, errors)
    for method in test_class.annotated_methods(Tag.TEST):
        method.validate_public_void_no_arg(False, errors)


def validate_instance_methods(test_class: TestClass, errors: list[Exception]) -> None:
    if not test_class.annotated_methods(Tag.TEST):
        errors.append(Exception("No runnable methods"))


def validate_zero_arg_constructor(test_class: TestClass, errors: list[Exception]) -> None:
    try:
        signature = inspect.signature(test_class.cls)
    except (TypeError, ValueError):
        return
    try:
        signature.bind()
    except TypeError:
        errors.append(Exception("Test class should have a public zero-argument constructor"))


def validate(test_class: TestClass, *, check_constructor: bool = True) -> None:
    """Raise InitializationError listing every problem with ``test_class``."""
    errors: list[Exception] = []
    if check_constructor:
        validate_zero_arg_constructor(test_class, errors)
    validate_instance_methods(test_class, errors)
    validate_methods(test_class, errors)
    if errors:
        raise InitializationError(errors)


def method_runners(
    test_class: TestClass,
    *arguments: Any,
    name_suffix: str = "",
    default_timeout: float | None = None,
) -> list[MethodRunner]:
    """One leaf per test method, each building its instance from ``arguments``."""
    return [
        MethodRunner(
            test_class,
            method,
            partial(test_class.create, *arguments),
            name_suffix=name_suffix,
            default_timeout=default_timeout,
        )
        for method in test_class.annotated_methods(Tag.TEST)
    ]


def class_runner(cls: type | TestClass, builder: RunnerBuilder | None = None) -> Suite:
    """Validated suite running every test method of ``cls``.

    Raises:
        InitializationError: when the class is malformed.
    """
    test_class = cls if isinstance(cls, TestClass) else TestClass(cls)
    validate(test_class)
    default_timeout = builder.default_timeout if builder else None
    return Suite(
        test_class.name,
        method_runners(test_class, default_timeout=default_timeout),
        test_class=test_class,
    )

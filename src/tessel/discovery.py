"""Declarative tagging of test classes and the class model built from it.

Decorators record tags on functions when the class body executes; ``TestClass``
reads them back from class dictionaries in definition order. Nothing here runs
a test; runners only ask a ``TestClass`` for its tagged members.

Example:
    class FibonacciTest:
        folder = rule(TemporaryFolder)

        @before
        def set_up(self):
            self.cache = {}

        @test(expected=ZeroDivisionError)
        def divides(self):
            1 / 0
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar


if TYPE_CHECKING:
    from tessel.rules.base import TestRule


F = TypeVar("F")
C = TypeVar("C", bound=type)

TAGS_ATTR = "__tessel_tags__"
CLASS_TAGS_ATTR = "__tessel_class_tags__"


class Tag(Enum):
    """Kinds of tagged class members."""

    TEST = "test"
    BEFORE = "before"
    AFTER = "after"
    BEFORE_CLASS = "before_class"
    AFTER_CLASS = "after_class"
    IGNORE = "ignore"
    PARAMETERS = "parameters"
    RULE = "rule"


# Tags whose hooks run superclass-first.
_TOP_DOWN = frozenset({Tag.BEFORE, Tag.BEFORE_CLASS})


@dataclass(frozen=True)
class TestOptions:
    """Options given to ``@test``."""

    __test__ = False  # Prevent pytest from collecting this as a test class

    expected: type[BaseException] | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class ParametersOptions:
    """Options given to ``@parameters``."""

    name: str = "{index}"


def _function_of(obj: Any) -> Any:
    return getattr(obj, "__func__", obj)


def _tag(obj: F, tag: Tag, value: Any = True) -> F:
    fn = _function_of(obj)
    tags: dict[Tag, Any] = dict(getattr(fn, TAGS_ATTR, {}))
    tags[tag] = value
    setattr(fn, TAGS_ATTR, tags)
    return obj


def tags_of(obj: Any) -> dict[Tag, Any]:
    """Tags recorded on a function, staticmethod or classmethod."""
    return getattr(_function_of(obj), TAGS_ATTR, {})


def test(
    fn: F | None = None,
    *,
    expected: type[BaseException] | None = None,
    timeout: float | None = None,
) -> F | Callable[[F], F]:
    """Mark a method as a test.

    Args:
        expected: Exception type the test must raise to pass.
        timeout: Seconds after which the test fails.
    """
    options = TestOptions(expected=expected, timeout=timeout)

    def decorator(fn: F) -> F:
        return _tag(fn, Tag.TEST, options)

    if fn is not None:
        return decorator(fn)
    return decorator


test.__test__ = False  # type: ignore[attr-defined]


def before(fn: F) -> F:
    """Run before every test of the class."""
    return _tag(fn, Tag.BEFORE)


def after(fn: F) -> F:
    """Run after every test of the class, whatever the outcome."""
    return _tag(fn, Tag.AFTER)


def before_class(fn: F) -> F:
    """Run once before all tests of the class. Must be a static or class method."""
    return _tag(fn, Tag.BEFORE_CLASS)


def after_class(fn: F) -> F:
    """Run once after all tests of the class. Must be a static or class method."""
    return _tag(fn, Tag.AFTER_CLASS)


def ignore(reason: str = "") -> Callable[[F], F]:
    """Skip a test method or a whole test class."""

    def decorator(obj: F) -> F:
        if inspect.isclass(obj):
            _class_tags(obj)[Tag.IGNORE] = reason
            return obj
        return _tag(obj, Tag.IGNORE, reason)

    return decorator


def parameters(name: str = "{index}") -> Callable[[F], F]:
    """Mark the static data source of a parameterized class.

    ``name`` may hold ``{index}`` and ``{0}``, ``{1}``, ... placeholders.
    """

    def decorator(fn: F) -> F:
        return _tag(fn, Tag.PARAMETERS, ParametersOptions(name=name))

    return decorator


def rule_method(fn: F | None = None, *, priority: int | None = None) -> F | Callable[[F], F]:
    """Mark a method returning a rule to wrap around every test."""

    def decorator(fn: F) -> F:
        return _tag(fn, Tag.RULE, priority)

    if fn is not None:
        return decorator(fn)
    return decorator


def run_with(factory: Callable[..., Any]) -> Callable[[C], C]:
    """Choose the runner factory used for a class.

    The factory is called as ``factory(cls, builder)``.
    """

    def decorator(cls: C) -> C:
        setattr(cls, "__tessel_runner__", factory)
        return cls

    return decorator


def suite_classes(*classes: type) -> Callable[[C], C]:
    """Turn a class into a suite over the listed test classes."""

    def decorator(cls: C) -> C:
        _class_tags(cls)["suite_classes"] = classes
        return cls

    return decorator


def _class_tags(cls: type) -> dict[Any, Any]:
    # Class tags are not inherited: look only at the class's own dictionary.
    if CLASS_TAGS_ATTR not in vars(cls):
        setattr(cls, CLASS_TAGS_ATTR, {})
    return vars(cls)[CLASS_TAGS_ATTR]


def class_tags(cls: type) -> dict[Any, Any]:
    return vars(cls).get(CLASS_TAGS_ATTR, {})


class RuleField:
    """Class attribute producing a fresh rule for every test instance.

    Example:
        class UsesFiles:
            folder = rule(TemporaryFolder)
    """

    def __init__(self, factory: Callable[[], TestRule], priority: int | None = None) -> None:
        if not callable(factory):
            msg = "rule() expects a factory such as a rule class or a lambda"
            raise TypeError(msg)
        self.factory = factory
        self.priority = priority
        self.name = "<rule>"

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        try:
            return instance.__dict__[self.name]
        except KeyError:
            value = instance.__dict__[self.name] = self.factory()
            return value


class ClassRuleField:
    """Class attribute holding a rule wrapped around the whole class.

    A new rule is created for every run of the class. While the class runs,
    reading the attribute returns that rule; otherwise it returns the field.

    Example:
        class UsesSharedFolder:
            shared = class_rule(TemporaryFolder)

            @test
            def writes(self):
                type(self).shared.new_file("data.txt")
    """

    def __init__(self, factory: Callable[[], TestRule], priority: int | None = None) -> None:
        if not callable(factory):
            msg = "class_rule() expects a factory such as a rule class or a lambda"
            raise TypeError(msg)
        self.factory = factory
        self.priority = priority
        self.name = "<class rule>"
        self.current: Any = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if self.current is None:
            return self
        return self.current

    def create(self) -> Any:
        return self.factory()


def rule(factory: Callable[[], TestRule], *, priority: int | None = None) -> Any:
    """Declare a per-test rule as a class attribute."""
    return RuleField(factory, priority)


def class_rule(factory: Callable[[], TestRule], *, priority: int | None = None) -> Any:
    """Declare a rule applied once around the whole class."""
    return ClassRuleField(factory, priority)


@dataclass(frozen=True)
class FrameworkMethod:
    """A tagged member of a test class."""

    name: str
    raw: Any
    declaring_class: type

    @property
    def fn(self) -> Callable[..., Any]:
        return _function_of(self.raw)

    @property
    def tags(self) -> dict[Tag, Any]:
        return tags_of(self.raw)

    @property
    def is_static(self) -> bool:
        return isinstance(self.raw, (staticmethod, classmethod))

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    @property
    def is_ignored(self) -> bool:
        return Tag.IGNORE in self.tags

    @property
    def ignore_reason(self) -> str:
        return self.tags.get(Tag.IGNORE, "")

    @property
    def test_options(self) -> TestOptions:
        return self.tags.get(Tag.TEST) or TestOptions()

    def invoke(self, target: Any, *args: Any, owner: type | None = None) -> Any:
        """Call the method on ``target`` (or on the class when ``target`` is None).

        Coroutine functions are driven to completion before returning.
        """
        bound = self.raw.__get__(target, owner or (type(target) if target is not None else self.declaring_class))
        result = bound(*args)
        if inspect.iscoroutine(result):
            result = asyncio.run(result)
        return result

    def validate_public_void_no_arg(self, is_static: bool, errors: list[Exception]) -> None:
        """Collect shape violations for a hook or test method into ``errors``."""
        if self.is_static != is_static:
            state = "should" if is_static else "should not"
            errors.append(Exception(f"Method {self.name}() {state} be static"))
        if self.declaring_class.__name__.startswith("_"):
            errors.append(Exception(f"Class {self.declaring_class.__qualname__} should be public"))
        if not self.is_public:
            errors.append(Exception(f"Method {self.name}() should be public"))

        fn = self.fn
        try:
            signature = inspect.signature(fn)
        except (TypeError, ValueError):
            return
        returns = signature.return_annotation
        if inspect.isgeneratorfunction(fn) or inspect.isasyncgenfunction(fn) or returns not in (
            inspect.Signature.empty,
            None,
            "None",
        ):
            errors.append(Exception(f"Method {self.name}() should return None"))

        params = list(signature.parameters.values())
        if not isinstance(self.raw, staticmethod):
            params = params[1:]
        if params:
            errors.append(Exception(f"Method {self.name}() should have no parameters"))


class TestClass:
    """Model of a test class: its tagged methods and rule attributes."""

    __test__ = False  # Prevent pytest from collecting this as a test class

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self._methods: dict[Tag, list[FrameworkMethod]] = {tag: [] for tag in Tag}
        self._scan()

    def _scan(self) -> None:
        hierarchy = [klass for klass in self.cls.__mro__ if klass is not object]
        seen: dict[Tag, set[str]] = {tag: set() for tag in Tag}
        per_class: dict[Tag, list[list[FrameworkMethod]]] = {tag: [] for tag in Tag}

        for klass in hierarchy:
            found: dict[Tag, list[FrameworkMethod]] = {tag: [] for tag in Tag}
            for name, raw in vars(klass).items():
                for tag in tags_of(raw):
                    if name in seen[tag]:
                        continue
                    seen[tag].add(name)
                    found[tag].append(FrameworkMethod(name, raw, klass))
            for tag, methods in found.items():
                per_class[tag].append(methods)

        for tag, groups in per_class.items():
            if tag in _TOP_DOWN:
                groups = list(reversed(groups))
            self._methods[tag] = [method for group in groups for method in group]

    @property
    def name(self) -> str:
        return self.cls.__qualname__

    @property
    def is_public(self) -> bool:
        return not self.cls.__name__.startswith("_")

    def annotated_methods(self, tag: Tag) -> list[FrameworkMethod]:
        """Tagged methods in execution order."""
        return list(self._methods[tag])

    def _attributes(self, kind: type) -> list[tuple[str, Any]]:
        found: dict[str, Any] = {}
        for klass in reversed(self.cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, kind):
                    found.pop(name, None)
                    found[name] = value
                elif name in found:
                    del found[name]
        return list(found.items())

    def rule_fields(self) -> list[tuple[str, RuleField]]:
        """Per-test rule attributes, superclass declarations first."""
        return self._attributes(RuleField)

    def class_rule_fields(self) -> list[tuple[str, ClassRuleField]]:
        return self._attributes(ClassRuleField)

    @property
    def is_ignored(self) -> bool:
        return Tag.IGNORE in class_tags(self.cls)

    @property
    def suite_classes(self) -> tuple[type, ...] | None:
        return class_tags(self.cls).get("suite_classes")

    @property
    def runner_factory(self) -> Callable[..., Any] | None:
        return getattr(self.cls, "__tessel_runner__", None)

    def create(self, *args: Any) -> Any:
        """Build a fresh instance of the class."""
        return self.cls(*args)

    def __repr__(self) -> str:
        return f"TestClass({self.name})"

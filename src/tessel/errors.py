"""Exception taxonomy for test orchestration."""

from __future__ import annotations

from collections.abc import Iterable


def type_name(cls: type) -> str:
    """Qualified name of an exception type, without the builtins prefix."""
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


class InitializationError(Exception):
    """A test class is malformed; carries every violation found."""

    def __init__(self, causes: Iterable[BaseException | str]) -> None:
        self.causes: list[BaseException] = [
            cause if isinstance(cause, BaseException) else Exception(cause) for cause in causes
        ]
        super().__init__("; ".join(str(cause) for cause in self.causes))


class UnexpectedExceptionError(Exception):
    """A test raised something other than the exception it declared."""

    def __init__(self, expected: type[BaseException], actual: BaseException) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Unexpected exception, expected<{type_name(expected)}> "
            f"but was<{type_name(type(actual))}>"
        )


class NoTestsMatchedError(Exception):
    """A filter pruned every test from a request."""


class TestTimedOutError(Exception):
    """A test exceeded its time budget."""

    __test__ = False  # Prevent pytest from collecting this as a test class

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"test timed out after {seconds:g} seconds")


class StoppedByUserError(Exception):
    """Raised when a test is about to start on a notifier that was asked to stop."""

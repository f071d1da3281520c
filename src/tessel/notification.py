"""Run lifecycle events and the notifier that dispatches them to listeners."""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tessel.description import Description
from tessel.errors import StoppedByUserError


if TYPE_CHECKING:
    from tessel.result import Result


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Failure:
    """A test (or a suite block) that raised."""

    description: Description
    exception: BaseException

    @property
    def test_header(self) -> str:
        return self.description.display_name

    @property
    def message(self) -> str:
        return str(self.exception)

    @property
    def trace(self) -> str:
        return "".join(traceback.format_exception(self.exception))

    def __str__(self) -> str:
        return f"{self.test_header}: {self.message}"


class RunListener:
    """Observer of run events. Override the callbacks you need."""

    def test_run_started(self, description: Description) -> None:
        """Called before any test has run."""

    def test_run_finished(self, result: Result) -> None:
        """Called when every test has finished."""

    def test_started(self, description: Description) -> None:
        """Called when a test is about to start."""

    def test_failure(self, failure: Failure) -> None:
        """Called when a test or a class block fails."""

    def test_ignored(self, description: Description) -> None:
        """Called instead of started/finished for an ignored test."""

    def test_finished(self, description: Description) -> None:
        """Called when a test has finished, whether it passed or failed."""


class RunNotifier:
    """Delivers run events to listeners, synchronously and in registration order.

    If a listener raises, the event is not delivered to the listeners after
    it; the error is logged and the next event goes to every listener again.
    Listeners must not add or remove listeners from inside a callback.

    One notifier serves one run session.
    """

    def __init__(self) -> None:
        self._listeners: list[RunListener] = []
        self._stop_requested = False

    @property
    def listeners(self) -> tuple[RunListener, ...]:
        return tuple(self._listeners)

    def _index(self, listener: RunListener) -> int | None:
        for index, existing in enumerate(self._listeners):
            if existing is listener:
                return index
        return None

    def add_listener(self, listener: RunListener) -> None:
        if self._index(listener) is None:
            self._listeners.append(listener)

    def add_first_listener(self, listener: RunListener) -> None:
        """Register a listener that must see events before all others."""
        if self._index(listener) is None:
            self._listeners.insert(0, listener)

    def remove_listener(self, listener: RunListener) -> None:
        index = self._index(listener)
        if index is not None:
            del self._listeners[index]

    def _fire(self, event: str, *args: Any) -> None:
        for listener in self._listeners:
            try:
                getattr(listener, event)(*args)
            except Exception:
                logger.exception(
                    "Listener %s failed on %s; event not delivered to remaining listeners",
                    type(listener).__name__,
                    event,
                )
                break

    def fire_test_run_started(self, description: Description) -> None:
        self._fire("test_run_started", description)

    def fire_test_run_finished(self, result: Result) -> None:
        self._fire("test_run_finished", result)

    def fire_test_started(self, description: Description) -> None:
        """Announce a test. Raises StoppedByUserError once a stop was requested."""
        if self._stop_requested:
            raise StoppedByUserError(f"run stopped before {description.display_name}")
        self._fire("test_started", description)

    def fire_test_failure(self, failure: Failure) -> None:
        self._fire("test_failure", failure)

    def fire_test_ignored(self, description: Description) -> None:
        self._fire("test_ignored", description)

    def fire_test_finished(self, description: Description) -> None:
        self._fire("test_finished", description)

    def please_stop(self) -> None:
        """Ask runners to stop launching tests. Work in progress is not interrupted."""
        logger.info("Stop requested")
        self._stop_requested = True

    @property
    def is_stopped(self) -> bool:
        return self._stop_requested

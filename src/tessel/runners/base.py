"""Runner protocol shared by leaf and composite runners."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tessel.description import Description
from tessel.notification import RunNotifier


if TYPE_CHECKING:
    from tessel.filters import Filter


@runtime_checkable
class Runner(Protocol):
    """Executes a description tree and reports events to a notifier."""

    @property
    def description(self) -> Description:
        ...

    def run(self, notifier: RunNotifier) -> None:
        """Run every test under this runner. Returns when all events were fired."""
        ...

    def filter(self, filter: Filter) -> Runner | None:
        """Copy of this runner keeping only tests ``filter`` accepts, or None if none remain."""
        ...


def test_count(runner: Runner) -> int:
    return runner.description.test_count


test_count.__test__ = False  # type: ignore[attr-defined]

"""Rule applying the same time budget to every test of a class."""

from __future__ import annotations

from tessel.description import Description
from tessel.statements import FailOnTimeout, Statement


class Timeout:
    """Fail any test that runs longer than ``seconds``.

    Example:
        class SlowThings:
            budget = rule(lambda: Timeout(2.5))
    """

    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            msg = f"timeout must be positive, got {seconds}"
            raise ValueError(msg)
        self.seconds = seconds

    def apply(self, base: Statement, description: Description) -> Statement:
        return FailOnTimeout(base, self.seconds)

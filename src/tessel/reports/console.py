"""Console reporter for tessel runs using Rich."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.traceback import Traceback

import tessel
from tessel.notification import Failure, RunListener


if TYPE_CHECKING:
    from tessel.description import Description
    from tessel.result import Result


class ConsoleListener(RunListener):
    """Prints progress, failures and a summary.

    Verbosity 0 prints one character per test (``.`` started, ``E`` failed,
    ``I`` ignored); 1 or more prints a line per test; -1 prints only the
    failures and the summary.
    """

    def __init__(self, console: Console | None = None, verbosity: int = 0) -> None:
        self.console = console or Console(file=sys.__stdout__)
        self.verbosity = verbosity
        self._failed: set[Description] = set()

    def _print_section_header(self, title: str) -> None:
        width = self.console.width
        header_title = f" {title} "
        fill = max(width - len(header_title), 0)
        left = fill // 2
        self.console.print("=" * left + header_title + "=" * (fill - left))

    def test_run_started(self, description: Description) -> None:
        if self.verbosity < 0:
            return
        self._print_section_header("TESSEL RUN STARTS")
        self.console.print(f"[bold]Collected {description.test_count} tests[/bold]\n")

    def test_started(self, description: Description) -> None:
        self._failed.discard(description)
        if self.verbosity == 0:
            self.console.print(".", end="")

    def test_failure(self, failure: Failure) -> None:
        self._failed.add(failure.description)
        if self.verbosity == 0:
            self.console.print("[red]E[/red]", end="")

    def test_ignored(self, description: Description) -> None:
        if self.verbosity == 0:
            self.console.print("[yellow]I[/yellow]", end="")
        elif self.verbosity > 0:
            self.console.print(f"  [yellow]-[/yellow] {escape(description.display_name)} [dim]ignored[/dim]")

    def test_finished(self, description: Description) -> None:
        if self.verbosity <= 0:
            return
        name = escape(description.display_name)
        if description in self._failed:
            self.console.print(f"  [red]✗[/red] {name}")
        else:
            self.console.print(f"  [green]✓[/green] {name}")

    def test_run_finished(self, result: Result) -> None:
        if self.verbosity == 0:
            self.console.print()
        self.console.print(f"Time: {result.run_time_ms / 1000:.3f}s")
        if result.failures:
            self._print_failures(result.failures)
        if result.stopped_early:
            self.console.print("[yellow]Run stopped before all tests ran.[/yellow]")
        self._print_summary(result)

    def _format_error(self, error: BaseException) -> Traceback | str:
        if error.__traceback__:
            return Traceback.from_exception(
                type(error),
                error,
                error.__traceback__,
                suppress=[tessel],
                show_locals=self.verbosity >= 2,
            )
        return escape(f"{type(error).__name__}: {error}")

    def _print_failures(self, failures: list[Failure]) -> None:
        self.console.print()
        self._print_section_header("FAILURES")
        for index, failure in enumerate(failures, start=1):
            self.console.print(
                Panel(
                    self._format_error(failure.exception),
                    title=f"{index}) {escape(failure.test_header)}",
                    title_align="left",
                    border_style="red",
                    expand=True,
                    padding=(1, 1),
                )
            )

    def _print_summary(self, result: Result) -> None:
        self.console.print()
        ignored = f", Ignored: {result.ignore_count}" if result.ignore_count else ""
        if result.was_successful:
            self.console.print(f"[bold green]OK ({result.run_count} tests{ignored})[/bold green]")
        else:
            self.console.print("[bold red]FAILURES!!![/bold red]")
            self.console.print(
                f"[bold]Tests run: {result.run_count},  Failures: {result.failure_count}{ignored}[/bold]"
            )

"""Command-line entry point: ``tessel package.module.Class[#method] ...``."""

from __future__ import annotations

import argparse
import importlib
import inspect
import logging
import sys
from collections.abc import Sequence

from rich.console import Console

from tessel.config import TesselSettings
from tessel.core import Core
from tessel.filters import NameFilter
from tessel.reports.console import ConsoleListener
from tessel.request import Request
from tessel.result import Result
from tessel.runners.builder import RunnerBuilder
from tessel.runners.suite import Suite
from tessel.tracing import TracingListener, init_tracing, shutdown_tracing
from tessel.version import __version__


logger = logging.getLogger(__name__)


def resolve_class(name: str) -> type:
    """Import ``package.module.Class`` or ``package.module:Class``.

    Raises:
        ImportError: when the module or the class cannot be found.
    """
    if ":" in name:
        module_name, _, qualname = name.partition(":")
    else:
        module_name, _, qualname = name.rpartition(".")
    if not module_name or not qualname:
        msg = f"Could not find class: {name}"
        raise ImportError(msg)

    try:
        obj = importlib.import_module(module_name)
    except ImportError as error:
        raise ImportError(f"Could not find class: {name}") from error
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as error:
            raise ImportError(f"Could not find class: {name}") from error
    if not inspect.isclass(obj):
        msg = f"Could not find class: {name} is not a class"
        raise ImportError(msg)
    return obj


def positive_seconds(value: str) -> float:
    """argparse type for timeouts: a number of seconds greater than zero."""
    try:
        seconds = float(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value!r}") from error
    if seconds <= 0:
        msg = f"timeout must be positive, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return seconds


class CLIApplication:
    """Parses selectors, builds the request and runs it."""

    def __init__(self, console: Console | None = None, settings: TesselSettings | None = None) -> None:
        self.console = console or Console()
        self.settings = settings or TesselSettings()
        self.parser = argparse.ArgumentParser(
            prog="tessel",
            description="Run tessel test classes.",
        )
        self.parser.add_argument(
            "selectors",
            nargs="+",
            help="Test classes as package.module.Class or package.module:Class, optionally with #method.",
        )
        self.parser.add_argument(
            "-k",
            dest="name_filter",
            help="Only run tests whose display name contains this text.",
        )
        self.parser.add_argument("-v", "--verbose", action="count", default=0, help="Print a line per test.")
        self.parser.add_argument("-q", "--quiet", action="store_true", help="Only print failures and the summary.")
        self.parser.add_argument(
            "--timeout",
            type=positive_seconds,
            default=None,
            help="Default per-test timeout in seconds (env TESSEL_DEFAULT_TIMEOUT).",
        )
        self.parser.add_argument("--trace", action="store_true", help="Record OpenTelemetry spans per test.")
        self.parser.add_argument("--trace-output", default=None, help="JSONL file for spans (default: traces.jsonl).")
        self.parser.add_argument("--version", action="version", version=f"tessel {__version__}")

    def run(self, argv: Sequence[str] | None = None) -> int:
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=self.settings.log_level,
            format="%(levelname)s %(name)s: %(message)s",
        )
        return exit_code(self.execute(args))

    def execute(self, args: argparse.Namespace) -> Result:
        verbosity = -1 if args.quiet else (args.verbose or self.settings.verbosity)
        timeout = args.timeout if args.timeout is not None else self.settings.default_timeout
        core = Core(builder=RunnerBuilder(default_timeout=timeout))
        core.add_listener(ConsoleListener(self.console, verbosity=verbosity))
        request = self.build_request(args.selectors, core.builder, args.name_filter)

        if not (args.trace or self.settings.trace):
            return core.run_request(request)

        output = args.trace_output or self.settings.trace_output
        init_tracing(output_path=output)
        core.add_listener(TracingListener())
        try:
            result = core.run_request(request)
        finally:
            shutdown_tracing()
        self.console.print(f"[dim]Tracing written to {output}[/dim]")
        return result

    def build_request(
        self,
        selectors: Sequence[str],
        builder: RunnerBuilder,
        name_filter: str | None = None,
    ) -> Request:
        """One child per selector; unresolvable selectors become failing units."""
        children = []
        for selector in selectors:
            class_name, _, method_name = selector.partition("#")
            try:
                cls = resolve_class(class_name)
            except ImportError as error:
                logger.debug("Cannot resolve %s", class_name, exc_info=True)
                children.append(Request.error_report(class_name, error).get_runner())
                continue
            if method_name:
                request = Request.method(cls, method_name, builder=builder)
            else:
                request = Request.a_class(cls, builder=builder)
            children.append(request.get_runner())

        request = Request.runner(Suite("All", children))
        if name_filter:
            return request.filter_with(NameFilter(name_filter))
        return request


def exit_code(result: Result) -> int:
    return 0 if result.was_successful else 1


def run_main(argv: Sequence[str] | None = None, console: Console | None = None) -> Result:
    """Run selectors like the command line does, returning the result instead of exiting."""
    app = CLIApplication(console)
    return app.execute(app.parser.parse_args(argv))


def main(argv: Sequence[str] | None = None) -> None:
    sys.exit(CLIApplication().run(argv))


if __name__ == "__main__":
    main()

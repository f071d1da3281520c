"""Tests for tessel.reports.console module."""

import io

from rich.console import Console

import tessel
from tessel.core import Core
from tessel.reports import ConsoleListener


class Mixed:
    @tessel.test
    def passes(self):
        pass

    @tessel.test
    def fails(self):
        raise AssertionError("numbers disagree")

    @tessel.ignore("later")
    @tessel.test
    def skipped(self):
        pass


class AllGood:
    @tessel.test
    def passes(self):
        pass

    @tessel.test
    def also_passes(self):
        pass


class Flaky:
    calls = 0

    @tessel.test
    def flips(self):
        Flaky.calls += 1
        assert Flaky.calls > 1, "first call fails"


def run_and_capture(*classes, verbosity=0):
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None, force_terminal=False)
    core = Core()
    core.add_listener(ConsoleListener(console, verbosity=verbosity))
    result = core.run(*classes)
    return result, buffer.getvalue()


class TestConsoleListener:
    """Tests for ConsoleListener output."""

    def test_success_summary(self):
        _, output = run_and_capture(AllGood)
        assert "TESSEL RUN STARTS" in output
        assert "Collected 2 tests" in output
        assert ".." in output
        assert "OK (2 tests)" in output
        assert "FAILURES" not in output

    def test_failure_summary(self):
        _, output = run_and_capture(Mixed)
        assert ".EI" in output.replace("\n", "")
        assert "1) fails(Mixed)" in output
        assert "numbers disagree" in output
        assert "FAILURES!!!" in output
        assert "Tests run: 2,  Failures: 1, Ignored: 1" in output

    def test_verbose_lines(self):
        _, output = run_and_capture(Mixed, verbosity=1)
        assert "✓ passes(Mixed)" in output
        assert "✗ fails(Mixed)" in output
        assert "- skipped(Mixed) ignored" in output

    def test_quiet_skips_header(self):
        _, output = run_and_capture(AllGood, verbosity=-1)
        assert "TESSEL RUN STARTS" not in output
        assert "OK (2 tests)" in output

    def test_reports_stopped_run(self):
        buffer = io.StringIO()
        console = Console(file=buffer, width=120, color_system=None)
        core = Core()

        class StopAfterFirst(tessel.RunListener):
            def test_finished(self, description):
                core.please_stop()

        core.add_listener(StopAfterFirst())
        core.add_listener(ConsoleListener(console))
        core.run(AllGood)
        assert "Run stopped before all tests ran." in buffer.getvalue()

    def test_class_run_twice_marks_each_run(self):
        Flaky.calls = 0
        result, output = run_and_capture(Flaky, Flaky, verbosity=1)
        assert result.failure_count == 1
        assert "✗ flips(Flaky)" in output
        assert "✓ flips(Flaky)" in output
        assert output.index("✗ flips(Flaky)") < output.index("✓ flips(Flaky)")

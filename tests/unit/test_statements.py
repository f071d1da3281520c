"""Tests for tessel.statements module."""

import time

import pytest

import tessel
from tessel.discovery import Tag, TestClass
from tessel.errors import TestTimedOutError, UnexpectedExceptionError
from tessel.statements import (
    ExpectException,
    Fail,
    FailOnTimeout,
    FunctionStatement,
    RunAfters,
    RunBefores,
    raise_first,
)


def raising(error):
    def fn():
        raise error

    return FunctionStatement(fn)


class Hooks:
    log: list[str] = []

    @tessel.before
    def first_before(self):
        self.log.append("first_before")

    @tessel.before
    def second_before(self):
        self.log.append("second_before")

    @tessel.after
    def first_after(self):
        self.log.append("first_after")
        raise RuntimeError("first after failed")

    @tessel.after
    def second_after(self):
        self.log.append("second_after")
        raise KeyError("second after failed")


@pytest.fixture(autouse=True)
def clear_log():
    Hooks.log.clear()
    yield
    Hooks.log.clear()


class TestExpectException:
    """Tests for ExpectException classification."""

    def test_passes_when_expected_raised(self):
        ExpectException(raising(ValueError("boom")), ValueError).evaluate()

    def test_passes_for_subclass(self):
        ExpectException(raising(FileNotFoundError("gone")), OSError).evaluate()

    def test_fails_when_nothing_raised(self):
        statement = ExpectException(FunctionStatement(lambda: None), ValueError)
        with pytest.raises(AssertionError, match="Expected exception: ValueError"):
            statement.evaluate()

    def test_wraps_unexpected_exception(self):
        actual = KeyError("k")
        statement = ExpectException(raising(actual), ValueError)
        with pytest.raises(UnexpectedExceptionError) as exc_info:
            statement.evaluate()
        assert str(exc_info.value) == "Unexpected exception, expected<ValueError> but was<KeyError>"
        assert exc_info.value.__cause__ is actual
        assert exc_info.value.actual is actual

    def test_qualified_name_for_non_builtin(self):
        statement = ExpectException(raising(TestTimedOutError(1)), ValueError)
        with pytest.raises(UnexpectedExceptionError, match=r"but was<tessel\.errors\.TestTimedOutError>"):
            statement.evaluate()


class TestFailOnTimeout:
    """Tests for FailOnTimeout."""

    def test_fast_statement_passes(self):
        FailOnTimeout(FunctionStatement(lambda: None), 1.0).evaluate()

    def test_slow_statement_times_out(self):
        statement = FailOnTimeout(FunctionStatement(lambda: time.sleep(0.5)), 0.05)
        with pytest.raises(TestTimedOutError, match="test timed out after 0.05 seconds"):
            statement.evaluate()

    def test_error_from_worker_is_raised(self):
        with pytest.raises(ValueError, match="inside"):
            FailOnTimeout(raising(ValueError("inside")), 1.0).evaluate()


class TestHooks:
    """Tests for RunBefores and RunAfters."""

    def test_befores_run_in_order_then_statement(self):
        instance = Hooks()
        befores = TestClass(Hooks).annotated_methods(Tag.BEFORE)
        RunBefores(FunctionStatement(lambda: Hooks.log.append("test")), befores, instance).evaluate()
        assert Hooks.log == ["first_before", "second_before", "test"]

    def test_failing_before_skips_statement(self):
        class Broken:
            @tessel.before
            def explode(self):
                raise RuntimeError("setup")

        befores = TestClass(Broken).annotated_methods(Tag.BEFORE)
        ran = []
        with pytest.raises(RuntimeError, match="setup"):
            RunBefores(FunctionStatement(lambda: ran.append(True)), befores, Broken()).evaluate()
        assert ran == []

    def test_afters_all_run_and_first_failure_wins(self):
        afters = TestClass(Hooks).annotated_methods(Tag.AFTER)
        with pytest.raises(RuntimeError, match="first after failed") as exc_info:
            RunAfters(FunctionStatement(lambda: None), afters, Hooks()).evaluate()
        assert Hooks.log == ["first_after", "second_after"]
        assert any("second after failed" in note for note in exc_info.value.__notes__)

    def test_statement_failure_beats_after_failures(self, caplog):
        afters = TestClass(Hooks).annotated_methods(Tag.AFTER)
        with pytest.raises(ValueError, match="test body"):
            RunAfters(raising(ValueError("test body")), afters, Hooks()).evaluate()
        assert Hooks.log == ["first_after", "second_after"]
        assert "Suppressed RuntimeError" in caplog.text


class TestHelpers:
    """Tests for Fail and raise_first."""

    def test_fail_raises_given_error(self):
        error = OSError("disk")
        with pytest.raises(OSError) as exc_info:
            Fail(error).evaluate()
        assert exc_info.value is error

    def test_raise_first_with_no_errors_returns(self):
        raise_first([])

    def test_raise_first_notes_others(self):
        with pytest.raises(ValueError) as exc_info:
            raise_first([ValueError("a"), KeyError("b")])
        assert exc_info.value.__notes__ == ["Also failed: KeyError: 'b'"]

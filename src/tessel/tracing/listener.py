"""Run listener recording tests as OpenTelemetry spans."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.trace import Span, StatusCode

from tessel.notification import Failure, RunListener
from tessel.tracing.lifecycle import get_tracer


if TYPE_CHECKING:
    from tessel.description import Description
    from tessel.result import Result


class TracingListener(RunListener):
    """One span per run, with a child span per test.

    Failures are recorded as span exceptions with ERROR status; ignored tests
    get a zero-length span with ``test.status`` set to ``ignored``.
    """

    def __init__(self, tracer: trace.Tracer | None = None) -> None:
        self.tracer = tracer or get_tracer()
        self._run_span: Span | None = None
        self._spans: dict[Description, Span] = {}
        self._failed: set[Description] = set()

    def _start(self, description: Description) -> Span:
        context = trace.set_span_in_context(self._run_span) if self._run_span else None
        span = self.tracer.start_span(f"test.{description.display_name}", context=context)
        span.set_attribute("test.name", description.method_name or description.display_name)
        if description.class_name:
            span.set_attribute("test.class", description.class_name)
        return span

    def test_run_started(self, description: Description) -> None:
        self._run_span = self.tracer.start_span(f"run.{description.display_name}")
        self._run_span.set_attribute("run.test_count", description.test_count)

    def test_started(self, description: Description) -> None:
        self._failed.discard(description)
        self._spans[description] = self._start(description)

    def test_failure(self, failure: Failure) -> None:
        self._failed.add(failure.description)
        span = self._spans.get(failure.description) or self._run_span
        if span is None:
            return
        span.set_status(StatusCode.ERROR, failure.message)
        span.record_exception(failure.exception)

    def test_ignored(self, description: Description) -> None:
        span = self._start(description)
        span.set_attribute("test.status", "ignored")
        span.end()

    def test_finished(self, description: Description) -> None:
        span = self._spans.pop(description, None)
        if span is None:
            return
        span.set_attribute("test.status", "failed" if description in self._failed else "passed")
        span.end()

    def test_run_finished(self, result: Result) -> None:
        if self._run_span is None:
            return
        self._run_span.set_attribute("run.run_count", result.run_count)
        self._run_span.set_attribute("run.failure_count", result.failure_count)
        self._run_span.set_attribute("run.ignore_count", result.ignore_count)
        if not result.was_successful:
            self._run_span.set_status(StatusCode.ERROR)
        self._run_span.end()
        self._run_span = None

"""Tests for tessel.tracing module."""

import json

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

import tessel
from tessel.core import Core
from tessel.tracing import TracingListener, get_tracer, init_tracing, shutdown_tracing


class Traced:
    @tessel.test
    def passes(self):
        pass

    @tessel.test
    def fails(self):
        raise AssertionError("traced failure")

    @tessel.ignore()
    @tessel.test
    def skipped(self):
        pass


class Flaky:
    calls = 0

    @tessel.test
    def flips(self):
        Flaky.calls += 1
        assert Flaky.calls > 1, "first call fails"


@pytest.fixture(autouse=True)
def reset_tracing():
    yield
    shutdown_tracing()


@pytest.fixture
def exporter():
    exporter = InMemorySpanExporter()
    init_tracing(exporter=exporter)
    return exporter


def run_traced(*classes):
    core = Core()
    core.add_listener(TracingListener())
    return core.run(*classes)


def spans_by_name(exporter):
    return {span.name: span for span in exporter.get_finished_spans()}


class TestInitTracing:
    """Tests for tracer provider setup."""

    def test_get_tracer_without_init(self):
        assert get_tracer() is not None

    def test_reinit_replaces_provider(self):
        first = init_tracing(exporter=InMemorySpanExporter())
        second = init_tracing(exporter=InMemorySpanExporter())
        assert first is not second

    def test_service_name_resource(self):
        provider = init_tracing(service_name="my-suite", exporter=InMemorySpanExporter())
        assert provider.resource.attributes["service.name"] == "my-suite"


class TestTracingListener:
    """Tests for spans recorded per test."""

    def test_span_per_test_under_run_span(self, exporter):
        run_traced(Traced)
        spans = spans_by_name(exporter)
        run_span = spans["run.All"]
        passed = spans["test.passes(Traced)"]
        assert passed.parent.span_id == run_span.context.span_id
        assert passed.attributes["test.name"] == "passes"
        assert passed.attributes["test.class"] == "Traced"
        assert passed.attributes["test.status"] == "passed"

    def test_failure_recorded(self, exporter):
        run_traced(Traced)
        failed = spans_by_name(exporter)["test.fails(Traced)"]
        assert failed.attributes["test.status"] == "failed"
        assert failed.status.status_code == StatusCode.ERROR
        assert failed.events[0].name == "exception"
        assert "traced failure" in failed.events[0].attributes["exception.message"]

    def test_ignored_recorded(self, exporter):
        run_traced(Traced)
        skipped = spans_by_name(exporter)["test.skipped(Traced)"]
        assert skipped.attributes["test.status"] == "ignored"

    def test_run_span_counts(self, exporter):
        run_traced(Traced)
        run_span = spans_by_name(exporter)["run.All"]
        assert run_span.attributes["run.run_count"] == 2
        assert run_span.attributes["run.failure_count"] == 1
        assert run_span.attributes["run.ignore_count"] == 1
        assert run_span.attributes["run.test_count"] == 3
        assert run_span.status.status_code == StatusCode.ERROR

    def test_class_run_twice_keeps_statuses_apart(self, exporter):
        Flaky.calls = 0
        run_traced(Flaky, Flaky)
        statuses = [
            span.attributes["test.status"] for span in exporter.get_finished_spans() if span.name == "test.flips(Flaky)"
        ]
        assert statuses == ["failed", "passed"]


class TestJsonLinesSpanExporter:
    """Tests for the JSONL file exporter."""

    def test_writes_one_line_per_span(self, tmp_path):
        output = tmp_path / "traces.jsonl"
        init_tracing(output_path=output)
        run_traced(Traced)
        shutdown_tracing()

        records = [json.loads(line) for line in output.read_text().splitlines()]
        names = [record["name"] for record in records]
        assert "run.All" in names
        assert "test.passes(Traced)" in names
        failed = next(record for record in records if record["name"] == "test.fails(Traced)")
        assert failed["status"] == "ERROR"
        assert failed["attributes"]["test.status"] == "failed"
        assert failed["parentSpanId"] is not None

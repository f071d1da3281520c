"""Tracer provider setup for tessel runs."""

from __future__ import annotations

from pathlib import Path

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, SpanExporter

from tessel.tracing.exporters import JsonLinesSpanExporter


_provider: TracerProvider | None = None


def init_tracing(
    *,
    service_name: str = "tessel",
    output_path: Path | str = "traces.jsonl",
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """Create the tracer provider used by tessel, exporting spans as they finish.

    Calling it again replaces the previous provider. The provider is kept
    private to tessel rather than installed as the global one.
    """
    global _provider

    if _provider is not None:
        _provider.shutdown()
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(SimpleSpanProcessor(exporter or JsonLinesSpanExporter(output_path)))
    _provider = provider
    return provider


def get_tracer() -> trace.Tracer:
    """Tracer from the tessel provider, or the global one when tracing was not initialised."""
    if _provider is not None:
        return _provider.get_tracer("tessel")
    return trace.get_tracer("tessel")


def shutdown_tracing() -> None:
    global _provider

    if _provider is not None:
        _provider.shutdown()
        _provider = None

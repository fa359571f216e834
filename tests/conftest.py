"""Shared fixtures for bridge tests."""

from collections.abc import Iterator

import pytest
from opencensus.trace import execution_context
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

import ocbridge


@pytest.fixture(autouse=True)
def isolate_default_tracer() -> Iterator[None]:
    """Restore the OpenCensus default tracer and current span after each test.

    Both live in process wide OpenCensus state, so a test installing the
    bridge would otherwise leak it into the next one.
    """
    saved = ocbridge.save_default_tracer()
    current_span = execution_context.get_current_span()
    yield
    ocbridge.restore_default_tracer(saved)
    execution_context.set_current_span(current_span)


@pytest.fixture
def exporter() -> InMemorySpanExporter:
    """Provide an in-memory span exporter."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(exporter: InMemorySpanExporter) -> Iterator[TracerProvider]:
    """Provide a tracer provider exporting synchronously to ``exporter``.

    The provider is never registered globally, so tests relying on the
    global no-op provider are unaffected.
    """
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def bridge(tracer_provider: TracerProvider) -> ocbridge.BridgeTracer:
    """Provide a bridge tracer recording into ``tracer_provider``."""
    return ocbridge.new_trace_bridge(tracer_provider=tracer_provider)

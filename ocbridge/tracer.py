"""OpenCensus tracer backed by an OpenTelemetry tracer."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

import opentelemetry.context
import opentelemetry.trace
from opencensus.trace import span_context as span_context_module
from opencensus.trace.tracers import base
from opentelemetry.context import Context

from .config import TraceBridgeConfig
from .convert import oc_span_context_to_otel, oc_span_kind_to_otel
from .span import BridgeSpan

_logger = logging.getLogger(__name__)

_BRIDGE_SPAN_KEY = opentelemetry.context.create_key("ocbridge-span")


class BridgeTracer(base.Tracer):
    """OpenCensus tracer that creates OpenTelemetry spans.

    The tracer offers two ways of tracking the current span:

    - Explicit contexts, where :py:meth:`start_span_in_context` returns a new
      OpenTelemetry context carrying the span and :py:meth:`from_context`
      reads it back.
    - The implicit OpenCensus :py:class:`opencensus.trace.tracers.base.Tracer`
      contract (:py:meth:`start_span`, :py:meth:`end_span`, ...), where the
      span is attached to the current OpenTelemetry context and recorded as
      the OpenCensus current span.

    Either way, OpenCensus spans become parents of OpenTelemetry spans and
    vice versa.
    """

    def __init__(self, tracer: opentelemetry.trace.Tracer) -> None:
        """Create a bridge tracer.

        Args:
            tracer: The OpenTelemetry tracer to create spans with. It is owned
                by the caller.
        """
        super().__init__()
        self._tracer = tracer

    @property
    def tracer(self) -> opentelemetry.trace.Tracer:
        """The OpenTelemetry tracer spans are created with."""
        return self._tracer

    def start_span_in_context(
        self,
        context: Context | None,
        name: str,
        *,
        kind: int | None = None,
        sampler: Any = None,
    ) -> tuple[Context, BridgeSpan]:
        """Start a span as a child of the span in the given context.

        Args:
            context: Context holding the parent span. Defaults to the current
                context.
            name: Operation name of the span.
            kind: OpenCensus span kind.
            sampler: OpenCensus sampler. Not supported, sampling is decided by
                the OpenTelemetry tracer provider.

        Returns:
            A context carrying the new span, and the span.
        """
        if sampler is not None:
            _logger.warning(
                "OpenCensus samplers are not supported and %r is ignored, "
                "configure sampling on the OpenTelemetry tracer provider",
                sampler,
            )
        if context is None:
            context = opentelemetry.context.get_current()
        otel_span = self._tracer.start_span(
            name, context=context, kind=oc_span_kind_to_otel(kind)
        )
        span = BridgeSpan(otel_span, self, name, kind)
        return self.new_context(context, span), span

    def start_span_with_remote_parent(
        self,
        context: Context | None,
        name: str,
        parent: span_context_module.SpanContext,
        *,
        kind: int | None = None,
        sampler: Any = None,
    ) -> tuple[Context, BridgeSpan]:
        """Start a span as a child of a span in another process.

        Args:
            context: Context to derive the returned context from. Defaults to
                the current context. A span it holds is not the parent.
            name: Operation name of the span.
            parent: OpenCensus span context propagated from the remote parent.
            kind: OpenCensus span kind.
            sampler: OpenCensus sampler, ignored as in
                :py:meth:`start_span_in_context`.

        Returns:
            A context carrying the new span, and the span.
        """
        remote_parent = opentelemetry.trace.NonRecordingSpan(
            oc_span_context_to_otel(parent, is_remote=True)
        )
        context = opentelemetry.trace.set_span_in_context(remote_parent, context)
        return self.start_span_in_context(context, name, kind=kind, sampler=sampler)

    def from_context(self, context: Context | None = None) -> BridgeSpan:
        """Return the span held by a context.

        Never fails. A context without a span yields a handle for the
        invalid, non-recording span.

        Args:
            context: The context. Defaults to the current context.
        """
        if context is None:
            context = opentelemetry.context.get_current()
        otel_span = opentelemetry.trace.get_current_span(context)
        span = opentelemetry.context.get_value(_BRIDGE_SPAN_KEY, context)
        if isinstance(span, BridgeSpan) and span.otel_span is otel_span:
            return span
        # Started directly through OpenTelemetry, or no span at all
        return BridgeSpan(otel_span, self)

    def new_context(self, context: Context | None, span: BridgeSpan) -> Context:
        """Return a copy of the context carrying the span."""
        context = opentelemetry.trace.set_span_in_context(span.otel_span, context)
        return opentelemetry.context.set_value(_BRIDGE_SPAN_KEY, span, context)

    def start_span(self, name: str = "span") -> BridgeSpan:
        """Start a span and make it current.

        Implementation of
        :py:meth:`opencensus.trace.tracers.base.Tracer.start_span`.
        """
        context, span = self.start_span_in_context(None, name)
        span._attach(context)
        return span

    def span(self, name: str = "span") -> BridgeSpan:
        """Start a current span, usable as a context manager.

        Implementation of :py:meth:`opencensus.trace.tracers.base.Tracer.span`.
        """
        return self.start_span(name)

    def end_span(self) -> None:
        """End the current span.

        Implementation of
        :py:meth:`opencensus.trace.tracers.base.Tracer.end_span`.
        """
        span = self._current_bridge_span()
        if span is None:
            _logger.warning("No active span, cannot do end_span.")
            return
        span.end()

    def current_span(self) -> BridgeSpan:
        """Return the current span.

        Implementation of
        :py:meth:`opencensus.trace.tracers.base.Tracer.current_span`.
        """
        return self.from_context()

    def add_attribute_to_current_span(
        self, attribute_key: str, attribute_value: Any
    ) -> None:
        """Set an attribute on the current span.

        Implementation of
        :py:meth:`opencensus.trace.tracers.base.Tracer.add_attribute_to_current_span`.
        """
        self.current_span().add_attribute(attribute_key, attribute_value)

    def finish(self) -> None:
        """End every span this tracer made current in this context.

        Implementation of :py:meth:`opencensus.trace.tracers.base.Tracer.finish`.
        """
        span = self._current_bridge_span()
        while span is not None and span.is_attached:
            span.end()
            span = self._current_bridge_span()

    def list_collected_spans(self) -> list[Any]:
        """Return nothing, spans are collected by OpenTelemetry.

        Implementation of
        :py:meth:`opencensus.trace.tracers.base.Tracer.list_collected_spans`.
        """
        return []

    def _current_bridge_span(self) -> BridgeSpan | None:
        span = opentelemetry.context.get_value(_BRIDGE_SPAN_KEY)
        if isinstance(span, BridgeSpan):
            return span
        return None


def new_trace_bridge(
    config: TraceBridgeConfig | None = None,
    *,
    tracer_provider: opentelemetry.trace.TracerProvider | None = None,
) -> BridgeTracer:
    """Create a bridge tracer from configuration.

    Args:
        config: Bridge configuration. Defaults to an empty configuration.
        tracer_provider: Shortcut for setting
            :py:attr:`TraceBridgeConfig.tracer_provider`. Overrides the
            provider in ``config``.

    Returns:
        A tracer using the configured provider, or the global provider when
        none is configured.
    """
    config = config or TraceBridgeConfig()
    if tracer_provider is not None:
        config = dataclasses.replace(config, tracer_provider=tracer_provider)
    return BridgeTracer(config.tracer())

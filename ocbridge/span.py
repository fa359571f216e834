"""OpenCensus span handle backed by an OpenTelemetry span."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextvars import Token
from typing import TYPE_CHECKING, Any

import opentelemetry.context
import opentelemetry.trace
from opencensus.trace import base_span, execution_context, time_event
from opencensus.trace.span import SpanKind as OCSpanKind
from opentelemetry.context import Context

from .convert import (
    oc_attributes_to_otel,
    oc_link_to_otel,
    oc_status_to_otel,
)

if TYPE_CHECKING:
    from opencensus.trace.link import Link
    from opencensus.trace.status import Status

    from .tracer import BridgeTracer

_logger = logging.getLogger(__name__)

MESSAGE_SEND_EVENT = "message send"
MESSAGE_RECEIVE_EVENT = "message receive"
UNCOMPRESSED_BYTE_SIZE_KEY = "uncompressed byte size"
COMPRESSED_BYTE_SIZE_KEY = "compressed byte size"


class BridgeSpan(base_span.BaseSpan):
    """OpenCensus span that records into an OpenTelemetry span.

    Handles are created by :py:class:`ocbridge.BridgeTracer`. Every
    OpenCensus call is delegated to the wrapped span with its arguments
    converted. :py:meth:`span_context` exposes the OpenTelemetry span
    context; use :py:func:`ocbridge.otel_span_context_to_oc` when an
    OpenCensus shaped context is needed.

    OpenTelemetry fixes the span kind when a span starts, so it must be
    passed to :py:meth:`ocbridge.BridgeTracer.start_span_in_context`.
    Assigning :py:attr:`span_kind` afterwards is logged and ignored.
    """

    def __init__(
        self,
        span: opentelemetry.trace.Span,
        tracer: BridgeTracer,
        name: str = "",
        kind: int | None = None,
    ) -> None:
        """Wrap an OpenTelemetry span.

        Args:
            span: The span to delegate to.
            tracer: The bridge tracer that created the span, used for
                child spans.
            name: The span name.
            kind: OpenCensus span kind the span was started with.
        """
        super().__init__()
        self._span = span
        self._tracer = tracer
        self._name = name
        self._span_kind = kind if kind is not None else OCSpanKind.UNSPECIFIED
        self._ended = False
        self._token: Token[Context] | None = None
        self._previous_current_span: Any = None

    @property
    def otel_span(self) -> opentelemetry.trace.Span:
        """The wrapped OpenTelemetry span."""
        return self._span

    @property
    def name(self) -> str:
        """Name of the span. Setting it renames the underlying span."""
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name
        self._span.update_name(name)

    def set_name(self, name: str) -> None:
        """Rename the span."""
        self.name = name

    @property
    def span_kind(self) -> int:
        """OpenCensus span kind the span was started with."""
        return self._span_kind

    @span_kind.setter
    def span_kind(self, kind: int) -> None:
        if kind == self._span_kind:
            return
        _logger.warning(
            "Cannot change the kind of span %r after it started, pass kind to "
            "BridgeTracer.start_span_in_context instead",
            self._name,
        )

    @property
    def children(self) -> list[BridgeSpan]:
        """Always empty, children are exported by OpenTelemetry on their own."""
        return []

    @property
    def span_id(self) -> str:
        """Span id as OpenCensus formats it, 16 lowercase hex characters."""
        return opentelemetry.trace.format_span_id(self.span_context().span_id)

    @property
    def trace_id(self) -> str:
        """Trace id as OpenCensus formats it, 32 lowercase hex characters."""
        return opentelemetry.trace.format_trace_id(self.span_context().trace_id)

    @property
    def is_attached(self) -> bool:
        """Whether the span is current through the implicit tracer API."""
        return self._token is not None

    def span_context(self) -> opentelemetry.trace.SpanContext:
        """Return the OpenTelemetry span context of this span."""
        return self._span.get_span_context()

    def is_recording_events(self) -> bool:
        """Whether the underlying span records events."""
        return self._span.is_recording()

    def span(self, name: str = "child_span") -> BridgeSpan:
        """Start a child of this span.

        The child is not made current.
        """
        context = opentelemetry.trace.set_span_in_context(self._span)
        _, child = self._tracer.start_span_in_context(context, name)
        return child

    def add_attribute(self, attribute_key: str, attribute_value: Any) -> None:
        """Set an attribute on the span."""
        attributes = oc_attributes_to_otel({attribute_key: attribute_value})
        self._span.set_attributes(attributes)

    def add_annotation(self, description: str, **attrs: Any) -> None:
        """Record an annotation as a span event."""
        self._span.add_event(description, oc_attributes_to_otel(attrs))

    def add_message_event(self, message_event: time_event.MessageEvent) -> None:
        """Record a message event as a span event.

        Sent and received messages become ``message send`` and
        ``message receive`` events carrying the byte sizes.
        """
        name = MESSAGE_SEND_EVENT
        if message_event.type == time_event.Type.RECEIVED:
            name = MESSAGE_RECEIVE_EVENT
        attributes = {}
        if message_event.uncompressed_size_bytes is not None:
            attributes[UNCOMPRESSED_BYTE_SIZE_KEY] = int(
                message_event.uncompressed_size_bytes
            )
        if message_event.compressed_size_bytes is not None:
            attributes[COMPRESSED_BYTE_SIZE_KEY] = int(
                message_event.compressed_size_bytes
            )
        self._span.add_event(name, attributes)

    def add_link(self, link: Link) -> None:
        """Link the span to another span."""
        otel_link = oc_link_to_otel(link)
        self._span.add_link(otel_link.context, otel_link.attributes)

    def set_status(self, status: Status) -> None:
        """Set the span status from an OpenCensus status."""
        self._span.set_status(oc_status_to_otel(status))

    def start(self) -> None:
        """Do nothing, the span started when it was created."""

    def end(self) -> None:
        """End the span and hand it to the tracer provider's pipeline.

        Ending twice is a no-op. If the span was made current by
        :py:meth:`ocbridge.BridgeTracer.start_span`, the previous current
        span is restored.
        """
        if self._ended:
            return
        self._ended = True
        self._span.end()
        if self._token is not None:
            token, self._token = self._token, None
            opentelemetry.context.detach(token)
            execution_context.set_current_span(self._previous_current_span)
            self._previous_current_span = None

    def finish(self) -> None:
        """End the span, the OpenCensus spelling of :py:meth:`end`."""
        self.end()

    def _attach(self, context: Context) -> None:
        self._previous_current_span = execution_context.get_current_span()
        self._token = opentelemetry.context.attach(context)
        execution_context.set_current_span(self)

    def __iter__(self) -> Iterator[BridgeSpan]:
        # Children are exported by the OpenTelemetry pipeline on their own
        yield self

    def __enter__(self) -> BridgeSpan:
        return self

    def __exit__(self, exception_type, exception_value, traceback) -> None:
        self.end()

    def __repr__(self) -> str:
        return f"BridgeSpan(name={self._name!r}, span_id={self.span_id})"

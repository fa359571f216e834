"""Conversions between OpenCensus and OpenTelemetry trace data.

OpenCensus keeps trace and span ids as lowercase hex strings while
OpenTelemetry keeps them as integers. Both denote the same big-endian bytes,
so converting never reorders, truncates, or regenerates an id.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import opentelemetry.trace
import opentelemetry.util.types
from opencensus.trace import link as link_module
from opencensus.trace import span_context as span_context_module
from opencensus.trace import status as status_module
from opencensus.trace import trace_options as trace_options_module
from opencensus.trace import tracestate as tracestate_module
from opencensus.trace.span import SpanKind as OCSpanKind
from opentelemetry.trace import SpanContext, SpanKind, Status, StatusCode
from typing_extensions import TypeAlias

OCAttributes: TypeAlias = Mapping[str, Any]
"""OpenCensus attributes, either a plain mapping or a
:py:class:`opencensus.trace.attributes.Attributes`."""

_SPAN_KINDS: dict[int, SpanKind] = {
    OCSpanKind.SERVER: SpanKind.SERVER,
    OCSpanKind.CLIENT: SpanKind.CLIENT,
}


def oc_span_context_to_otel(
    span_context: span_context_module.SpanContext, *, is_remote: bool = False
) -> SpanContext:
    """Convert an OpenCensus span context to an OpenTelemetry one.

    The trace id, span id and trace options are copied value for value. A
    missing OpenCensus span id becomes the invalid (zero) span id.

    Args:
        span_context: The OpenCensus span context.
        is_remote: Whether the resulting context was propagated from a remote
            parent.

    Returns:
        The equivalent OpenTelemetry span context.
    """
    span_id = opentelemetry.trace.INVALID_SPAN_ID
    if span_context.span_id:
        span_id = int(span_context.span_id, 16)
    trace_options = span_context.trace_options
    trace_flags = 0
    if trace_options is not None:
        trace_flags = int(trace_options.trace_options_byte)
    trace_state = opentelemetry.trace.TraceState()
    if span_context.tracestate:
        trace_state = opentelemetry.trace.TraceState(
            list(span_context.tracestate.items())
        )
    return SpanContext(
        trace_id=int(span_context.trace_id, 16),
        span_id=span_id,
        is_remote=is_remote,
        trace_flags=opentelemetry.trace.TraceFlags(trace_flags),
        trace_state=trace_state,
    )


def otel_span_context_to_oc(
    span_context: SpanContext,
) -> span_context_module.SpanContext:
    """Convert an OpenTelemetry span context to an OpenCensus one.

    The inverse of :py:func:`oc_span_context_to_otel`. Note OpenCensus does
    not accept an all-zero trace id and replaces it with a fresh one, so
    only valid contexts survive a round trip unchanged.

    Args:
        span_context: The OpenTelemetry span context.

    Returns:
        The equivalent OpenCensus span context.
    """
    span_id = None
    if span_context.span_id != opentelemetry.trace.INVALID_SPAN_ID:
        span_id = opentelemetry.trace.format_span_id(span_context.span_id)
    tracestate = None
    if span_context.trace_state:
        tracestate = tracestate_module.Tracestate()
        for key, value in span_context.trace_state.items():
            tracestate[key] = value
    return span_context_module.SpanContext(
        trace_id=opentelemetry.trace.format_trace_id(span_context.trace_id),
        span_id=span_id,
        trace_options=trace_options_module.TraceOptions(
            str(int(span_context.trace_flags))
        ),
        tracestate=tracestate,
        from_header=span_context.is_remote,
    )


def oc_span_kind_to_otel(kind: int | None) -> SpanKind:
    """Map an OpenCensus span kind, unspecified kinds become internal."""
    if kind is None:
        return SpanKind.INTERNAL
    return _SPAN_KINDS.get(kind, SpanKind.INTERNAL)


def oc_attributes_to_otel(
    attributes: OCAttributes | None,
) -> dict[str, opentelemetry.util.types.AttributeValue]:
    """Convert OpenCensus attributes to OpenTelemetry attributes.

    Values OpenTelemetry cannot carry are stringified.
    """
    if attributes is None:
        return {}
    # opencensus.trace.attributes.Attributes wraps the real dict
    attributes = getattr(attributes, "attributes", attributes)
    return {key: _attribute_value(value) for key, value in attributes.items()}


def _attribute_value(value: Any) -> opentelemetry.util.types.AttributeValue:
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def oc_status_to_otel(status: status_module.Status) -> Status:
    """Convert an OpenCensus status.

    Code 0 is OpenCensus OK, every other canonical code is an error.
    """
    if status.code == 0:
        return Status(StatusCode.OK)
    return Status(StatusCode.ERROR, status.message)


def oc_link_to_otel(link: link_module.Link) -> opentelemetry.trace.Link:
    """Convert an OpenCensus link to an OpenTelemetry link."""
    context = SpanContext(
        trace_id=int(link.trace_id, 16),
        span_id=int(link.span_id, 16),
        is_remote=True,
    )
    return opentelemetry.trace.Link(context, oc_attributes_to_otel(link.attributes))

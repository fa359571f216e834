"""Tests for translating OpenCensus data into OpenTelemetry data."""

import opentelemetry.trace
import pytest
from opencensus.trace import link as link_module
from opencensus.trace import span_context as span_context_module
from opencensus.trace import status as status_module
from opencensus.trace import trace_options as trace_options_module
from opencensus.trace import tracestate as tracestate_module
from opencensus.trace.span import SpanKind as OCSpanKind
from opentelemetry.trace import SpanContext, SpanKind, StatusCode, TraceFlags

from ocbridge import (
    oc_attributes_to_otel,
    oc_link_to_otel,
    oc_span_context_to_otel,
    oc_span_kind_to_otel,
    oc_status_to_otel,
    otel_span_context_to_oc,
)

TRACE_ID_BYTES = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16])
SPAN_ID_BYTES = bytes([1, 2, 3, 4, 5, 6, 7, 8])


def test_oc_span_context_to_otel():
    """Ids and trace options are copied byte for byte."""
    input = span_context_module.SpanContext(
        trace_id=TRACE_ID_BYTES.hex(),
        span_id=SPAN_ID_BYTES.hex(),
        trace_options=trace_options_module.TraceOptions("1"),
    )
    want = SpanContext(
        trace_id=int.from_bytes(TRACE_ID_BYTES, "big"),
        span_id=int.from_bytes(SPAN_ID_BYTES, "big"),
        is_remote=False,
        trace_flags=TraceFlags(1),
    )
    got = oc_span_context_to_otel(input)
    assert got == want
    assert got.trace_id.to_bytes(16, "big") == TRACE_ID_BYTES
    assert got.span_id.to_bytes(8, "big") == SPAN_ID_BYTES


@pytest.mark.parametrize(
    "trace_id,span_id,options",
    [
        ("ffffffffffffffffffffffffffffffff", "ffffffffffffffff", "0"),
        ("00000000000000000000000000000001", "0000000000000001", "1"),
        ("80f198ee56343ba864fe8b2a57d3eff7", "e457b5a2e4d86bd1", "255"),
    ],
)
def test_oc_span_context_to_otel_keeps_values(trace_id, span_id, options):
    """Edge values of ids and flags survive translation unchanged."""
    got = oc_span_context_to_otel(
        span_context_module.SpanContext(
            trace_id=trace_id,
            span_id=span_id,
            trace_options=trace_options_module.TraceOptions(options),
        )
    )
    assert opentelemetry.trace.format_trace_id(got.trace_id) == trace_id
    assert opentelemetry.trace.format_span_id(got.span_id) == span_id
    assert got.trace_flags == int(options)
    assert isinstance(got.trace_flags, TraceFlags)


def test_oc_span_context_to_otel_without_span_id():
    """A missing span id becomes the invalid span id."""
    got = oc_span_context_to_otel(
        span_context_module.SpanContext(trace_id=TRACE_ID_BYTES.hex())
    )
    assert got.span_id == opentelemetry.trace.INVALID_SPAN_ID
    assert got.trace_id == int.from_bytes(TRACE_ID_BYTES, "big")


def test_oc_span_context_to_otel_remote_and_tracestate():
    """Remote flag and tracestate entries are carried over."""
    tracestate = tracestate_module.Tracestate()
    tracestate["vendor"] = "value"
    got = oc_span_context_to_otel(
        span_context_module.SpanContext(
            trace_id=TRACE_ID_BYTES.hex(),
            span_id=SPAN_ID_BYTES.hex(),
            tracestate=tracestate,
        ),
        is_remote=True,
    )
    assert got.is_remote
    assert dict(got.trace_state) == {"vendor": "value"}


def test_otel_span_context_to_oc():
    """The outbound direction mirrors the inbound one."""
    got = otel_span_context_to_oc(
        SpanContext(
            trace_id=int.from_bytes(TRACE_ID_BYTES, "big"),
            span_id=int.from_bytes(SPAN_ID_BYTES, "big"),
            is_remote=True,
            trace_flags=TraceFlags(1),
            trace_state=opentelemetry.trace.TraceState([("vendor", "value")]),
        )
    )
    assert got.trace_id == TRACE_ID_BYTES.hex()
    assert got.span_id == SPAN_ID_BYTES.hex()
    assert int(got.trace_options.trace_options_byte) == 1
    assert got.from_header
    assert dict(got.tracestate) == {"vendor": "value"}


def test_otel_span_context_to_oc_without_span_id():
    """A zero span id becomes no OpenCensus span id."""
    got = otel_span_context_to_oc(
        SpanContext(
            trace_id=int.from_bytes(TRACE_ID_BYTES, "big"),
            span_id=opentelemetry.trace.INVALID_SPAN_ID,
            is_remote=False,
        )
    )
    assert got.span_id is None
    assert int(got.trace_options.trace_options_byte) == 0
    assert not got.from_header


@pytest.mark.parametrize(
    "kind,expected",
    [
        (None, SpanKind.INTERNAL),
        (OCSpanKind.UNSPECIFIED, SpanKind.INTERNAL),
        (OCSpanKind.SERVER, SpanKind.SERVER),
        (OCSpanKind.CLIENT, SpanKind.CLIENT),
        (42, SpanKind.INTERNAL),
    ],
)
def test_oc_span_kind_to_otel(kind, expected):
    """Server and client kinds map, everything else is internal."""
    assert oc_span_kind_to_otel(kind) == expected


def test_oc_attributes_to_otel():
    """Unsupported attribute values are stringified."""
    assert oc_attributes_to_otel(None) == {}
    assert oc_attributes_to_otel(
        {"str": "a", "bool": True, "int": 3, "float": 1.5, "list": [1, 2]}
    ) == {"str": "a", "bool": True, "int": 3, "float": 1.5, "list": "[1, 2]"}


def test_oc_status_to_otel():
    """OK maps to OK, any other code is an error with its message."""
    ok = oc_status_to_otel(status_module.Status(0))
    assert ok.status_code == StatusCode.OK

    error = oc_status_to_otel(status_module.Status(2, "boom"))
    assert error.status_code == StatusCode.ERROR
    assert error.description == "boom"


def test_oc_link_to_otel():
    """Links point at a remote span context with the same ids."""
    got = oc_link_to_otel(
        link_module.Link(trace_id=TRACE_ID_BYTES.hex(), span_id=SPAN_ID_BYTES.hex())
    )
    assert got.context.trace_id == int.from_bytes(TRACE_ID_BYTES, "big")
    assert got.context.span_id == int.from_bytes(SPAN_ID_BYTES, "big")
    assert got.context.is_remote
    assert not got.attributes

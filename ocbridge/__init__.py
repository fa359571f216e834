"""Bridge from OpenCensus tracing to OpenTelemetry.

Code instrumented with the OpenCensus tracing API records its spans through
an OpenTelemetry tracer provider once the bridge is installed:

    from opentelemetry.sdk.trace import TracerProvider
    import ocbridge

    ocbridge.install_trace_bridge(tracer_provider=TracerProvider())

Without a tracer provider the globally registered OpenTelemetry provider is
used. Until an application registers one, spans are valid but carry zero ids
and are never exported.
"""

from .config import TraceBridgeConfig
from .convert import (
    oc_attributes_to_otel,
    oc_link_to_otel,
    oc_span_context_to_otel,
    oc_span_kind_to_otel,
    oc_status_to_otel,
    otel_span_context_to_oc,
)
from .install import (
    DefaultTracerState,
    get_default_tracer,
    install_trace_bridge,
    installed_trace_bridge,
    restore_default_tracer,
    save_default_tracer,
    set_default_tracer,
)
from .span import BridgeSpan
from .tracer import BridgeTracer, new_trace_bridge
from .version import SCOPE_NAME, __version__, version

__all__ = [
    "BridgeSpan",
    "BridgeTracer",
    "DefaultTracerState",
    "SCOPE_NAME",
    "TraceBridgeConfig",
    "__version__",
    "get_default_tracer",
    "install_trace_bridge",
    "installed_trace_bridge",
    "new_trace_bridge",
    "oc_attributes_to_otel",
    "oc_link_to_otel",
    "oc_span_context_to_otel",
    "oc_span_kind_to_otel",
    "oc_status_to_otel",
    "otel_span_context_to_oc",
    "restore_default_tracer",
    "save_default_tracer",
    "set_default_tracer",
    "version",
]

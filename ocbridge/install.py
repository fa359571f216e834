"""Installing the bridge as the OpenCensus default tracer.

OpenCensus instrumentation reads its tracer from
:py:func:`opencensus.trace.execution_context.get_opencensus_tracer`. The
functions here replace that tracer with a :py:class:`ocbridge.BridgeTracer`
so legacy instrumentation records into OpenTelemetry. Prefer passing a
:py:class:`ocbridge.BridgeTracer` explicitly where the calling code allows
it; the default tracer slot is shared by everything in the process.

OpenCensus keeps the tracer in a runtime context slot. Setting it only
changes the current context, and contexts created later, such as those of
new threads, fall back to the slot's default. Installing therefore replaces
both.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import opentelemetry.trace
from opencensus.common.runtime_context import RuntimeContext
from opencensus.trace import execution_context
from opencensus.trace.tracers import base

from .config import TraceBridgeConfig
from .tracer import BridgeTracer, new_trace_bridge

_logger = logging.getLogger(__name__)

_install_lock = threading.Lock()

_TRACER_SLOT_NAME = "tracer"


@dataclass(frozen=True)
class DefaultTracerState:
    """Saved OpenCensus default tracer, see :py:func:`save_default_tracer`."""

    tracer: base.Tracer
    """Tracer of the context the state was saved in."""
    default: Callable[[], base.Tracer]
    """Factory new contexts resolve their tracer with."""


def _tracer_slot():
    # Registered by opencensus.trace.execution_context
    return RuntimeContext._slots[_TRACER_SLOT_NAME]


def get_default_tracer() -> base.Tracer:
    """Return the OpenCensus default tracer."""
    return execution_context.get_opencensus_tracer()


def set_default_tracer(tracer: base.Tracer) -> None:
    """Make a tracer the OpenCensus default for the whole process.

    The tracer becomes the one of the current context and of every context
    created afterwards, including those of new threads.
    """
    with _install_lock:
        _tracer_slot().default = lambda: tracer
        execution_context.set_opencensus_tracer(tracer)


def save_default_tracer() -> DefaultTracerState:
    """Capture the OpenCensus default tracer for :py:func:`restore_default_tracer`."""
    with _install_lock:
        return DefaultTracerState(
            tracer=execution_context.get_opencensus_tracer(),
            default=_tracer_slot().default,
        )


def restore_default_tracer(state: DefaultTracerState) -> None:
    """Put back a default tracer captured by :py:func:`save_default_tracer`."""
    with _install_lock:
        _tracer_slot().default = state.default
        execution_context.set_opencensus_tracer(state.tracer)
    _logger.debug("Restored OpenCensus default tracer %r", state.tracer)


def install_trace_bridge(
    config: TraceBridgeConfig | None = None,
    *,
    tracer_provider: opentelemetry.trace.TracerProvider | None = None,
) -> None:
    """Make a new bridge tracer the OpenCensus default tracer.

    The previous default is not kept. Callers that need it back, tests in
    particular, should save it with :py:func:`save_default_tracer` or use
    :py:func:`installed_trace_bridge`. Installing again replaces the bridge.

    Args:
        config: Bridge configuration.
        tracer_provider: Shortcut for setting
            :py:attr:`TraceBridgeConfig.tracer_provider`.
    """
    bridge = new_trace_bridge(config, tracer_provider=tracer_provider)
    set_default_tracer(bridge)
    _logger.debug("Installed OpenCensus trace bridge %r", bridge)


@contextmanager
def installed_trace_bridge(
    config: TraceBridgeConfig | None = None,
    *,
    tracer_provider: opentelemetry.trace.TracerProvider | None = None,
) -> Iterator[BridgeTracer]:
    """Install a bridge tracer for the duration of a block.

    The previous OpenCensus default tracer is restored on exit, even if the
    block raises.

    Args:
        config: Bridge configuration.
        tracer_provider: Shortcut for setting
            :py:attr:`TraceBridgeConfig.tracer_provider`.

    Yields:
        The installed bridge tracer.
    """
    previous = save_default_tracer()
    bridge = new_trace_bridge(config, tracer_provider=tracer_provider)
    set_default_tracer(bridge)
    try:
        yield bridge
    finally:
        restore_default_tracer(previous)

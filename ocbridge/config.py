"""Configuration for the OpenCensus trace bridge."""

from __future__ import annotations

from dataclasses import dataclass

import opentelemetry.trace

from .version import SCOPE_NAME, version


@dataclass(frozen=True)
class TraceBridgeConfig:
    """Configuration of a :py:class:`ocbridge.BridgeTracer`.

    The bridge never owns the tracer provider. Shutting it down and flushing
    it remain the responsibility of whoever created it.
    """

    tracer_provider: opentelemetry.trace.TracerProvider | None = None
    """Provider the bridge creates spans with. When unset, the globally
    registered provider is used, which is a no-op proxy until the
    application registers one."""

    def __post_init__(self) -> None:
        if self.tracer_provider is not None and not isinstance(
            self.tracer_provider, opentelemetry.trace.TracerProvider
        ):
            raise TypeError(
                "tracer_provider must be an opentelemetry.trace.TracerProvider, "
                f"but got {type(self.tracer_provider).__name__}"
            )

    def resolve_tracer_provider(self) -> opentelemetry.trace.TracerProvider:
        """Return the configured provider or the global one."""
        if self.tracer_provider is not None:
            return self.tracer_provider
        return opentelemetry.trace.get_tracer_provider()

    def tracer(self) -> opentelemetry.trace.Tracer:
        """Create the OpenTelemetry tracer the bridge delegates to.

        Returns:
            A tracer for the bridge's instrumentation scope and version.
        """
        return self.resolve_tracer_provider().get_tracer(SCOPE_NAME, version())

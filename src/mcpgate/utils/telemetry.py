"""Tracing for the gateway's request path.

Request handling opens its spans through :func:`get_tracer`.  Only the
OpenTelemetry API is a hard dependency, so until :func:`configure_telemetry`
installs an SDK provider those spans cost nothing::

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("tool.execute") as span:
        span.set_attribute(ATTR_TOOL_NAME, "get_customer")
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

from opentelemetry import trace

# Span attribute keys
ATTR_RPC_METHOD = "mcpgate.rpc.method"
ATTR_RPC_ID = "mcpgate.rpc.id"
ATTR_RPC_ERROR_CODE = "mcpgate.rpc.error_code"
ATTR_TOOL_NAME = "mcpgate.tool.name"
ATTR_TOOL_SUCCESS = "mcpgate.tool.success"
ATTR_BATCH_SIZE = "mcpgate.batch.size"
ATTR_BATCH_FAILED = "mcpgate.batch.failed"
ATTR_TARGET = "mcpgate.resilience.target"
ATTR_CIRCUIT_STATE = "mcpgate.resilience.circuit_state"

_INSTRUMENTATION_NAME = "mcpgate"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for a gateway module, no-op until a provider is installed."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "mcpgate",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global tracer provider that exports the gateway's spans.

    :meth:`~mcpgate.sdk.gateway.Gateway.from_settings` calls this when
    ``telemetry.enabled`` is set.  Every span carries *service_name* as its
    resource name, so several gateways can share one collector.  Console
    export writes each span to stdout as soon as it ends; OTLP export
    batches spans towards the collector at *otlp_endpoint*.

    The SDK ships in the ``otel`` extra.  Without it an ``ImportError``
    tells the operator which extra to install.
    """
    sdk = _load_sdk()
    provider = sdk.TracerProvider(resource=sdk.Resource.create({"service.name": service_name}))

    if export_to_console:
        provider.add_span_processor(sdk.SimpleSpanProcessor(sdk.ConsoleSpanExporter()))
    if otlp_endpoint:
        exporter = _otlp_exporter(otlp_endpoint)
        provider.add_span_processor(sdk.BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)


def _load_sdk() -> SimpleNamespace:
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required to export gateway spans. "
            "Install it with: pip install mcpgate[otel]"
        )
        raise ImportError(msg) from exc

    return SimpleNamespace(
        Resource=Resource,
        TracerProvider=TracerProvider,
        BatchSpanProcessor=BatchSpanProcessor,
        ConsoleSpanExporter=ConsoleSpanExporter,
        SimpleSpanProcessor=SimpleSpanProcessor,
    )


def _otlp_exporter(endpoint: str) -> Any:
    """gRPC span exporter for a collector; the package is optional even with the SDK."""
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required to send spans to "
            f"{endpoint}. Install it with: pip install mcpgate[otel]"
        )
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)

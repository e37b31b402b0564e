"""Tracing for tool dispatch and JSON-RPC handling.

Spans are created through the OpenTelemetry API only; until
:func:`configure_telemetry` installs an SDK provider they are no-ops.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

ATTR_TOOL_NAME = "gitmcp.tool.name"
ATTR_TOOL_OUTCOME = "gitmcp.tool.outcome"
ATTR_SESSION_ID = "gitmcp.session.id"
ATTR_RPC_METHOD = "gitmcp.rpc.method"

_INSTRUMENTATION_NAME = "gitmcp"

_OTEL_HINT = "Install it with: pip install git-tools-mcp[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return the tracer for *name*, defaulting to the package tracer."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "git-tools-mcp",
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global tracer provider with the requested span exporters.

    Console export writes to stdout, so the CLI only offers it for the SSE
    transport.

    Raises:
        ImportError: If ``opentelemetry-sdk``, or the OTLP exporter when
            *otlp_endpoint* is given, is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        raise ImportError(f"opentelemetry-sdk is required for tracing. {_OTEL_HINT}") from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))
    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
            OTLPSpanExporter,
        )
    except ImportError as exc:
        msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_OTEL_HINT}"
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)

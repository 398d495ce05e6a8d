"""OpenTelemetry tracing for reconciliation passes and their steps."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Tracer

from . import __version__
from .config import OperatorConfig

logger = logging.getLogger(__name__)

_tracer: Tracer | None = None


def initialize_tracing(config: OperatorConfig) -> bool:
    """Install an OTLP exporting tracer provider when tracing is enabled.

    Returns:
        True when spans will be exported
    """
    global _tracer

    if not config.traces_enabled:
        return False

    resource = Resource.create({
        "service.name": config.service_name,
        "service.version": __version__,
    })
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otlp_endpoint)))
    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(config.service_name, __version__)
    logger.info(f"Tracing enabled, exporting to {config.otlp_endpoint}")
    return True


def get_tracer() -> Tracer | None:
    """Return the operator tracer, None until tracing is initialized."""
    return _tracer


def resource_attributes(kind: str, namespace: str, name: str) -> dict[str, str]:
    """Span attributes identifying one declared resource."""
    return {
        "resource.kind": kind,
        "resource.namespace": namespace,
        "resource.name": name,
    }


@contextmanager
def trace_span(
    name: str,
    kind: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span | None]:
    """Open a span around a reconciliation pass or step.

    Args:
        name: Span name, the pass or step name
        kind: Resource kind (Bucket, Policy, User)
        attributes: Additional span attributes

    Yields:
        The span, or None when tracing is disabled
    """
    tracer = get_tracer()
    if tracer is None:
        yield None
        return

    attrs = dict(attributes or {})
    if kind:
        attrs["resource.kind"] = kind

    # Exceptions are recorded on the span with ERROR status
    with tracer.start_as_current_span(name, attributes=attrs) as span:
        yield span

"""OpenTelemetry spans around indexing and search operations.

Spans inherit the active operation context (task, run id, operation) as
attributes, and log records pick up the ids of the current span through
``current_trace_ids`` so logs and traces of one rebuild can be joined.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from catalog_search.observability.context import get_operation_context


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

TRACER_NAME = "catalog_search"

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "catalog-search",
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider. Span processors and exporters belong to the host process."""
    provider = TracerProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = provider.get_tracer(TRACER_NAME)
    logger.debug("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    """Tracer from ``init_tracing``, or from whatever provider the host installed."""
    if _tracer_holder["tracer"] is None:
        _tracer_holder["tracer"] = trace.get_tracer(TRACER_NAME)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


def current_trace_ids() -> dict[str, str]:
    """Hex trace and span ids of the active span, or ``{}`` outside a recorded span."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": format(span_context.trace_id, "032x"),
        "span_id": format(span_context.span_id, "016x"),
    }


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Open a span tagged with the operation context; escaping exceptions mark it failed."""
    span_attributes = {f"catalog.{key}": str(value) for key, value in get_operation_context().items()}
    span_attributes.update(attributes or {})

    with get_tracer().start_as_current_span(name, kind=kind) as span:
        for key, value in span_attributes.items():
            span.set_attribute(key, value)
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise

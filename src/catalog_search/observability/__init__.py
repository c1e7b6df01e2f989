"""Observability module: structured logging, Prometheus metrics and OpenTelemetry tracing."""

from catalog_search.observability.context import get_operation_context, operation_context, operation_scope
from catalog_search.observability.logging import JsonFormatter, configure_logging
from catalog_search.observability.metrics import (
    DELETED_DOCUMENTS,
    DOCUMENT_FAILURES,
    INDEXED_DOCUMENTS,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    SKIPPED_OPERATIONS,
    get_metrics,
    track_latency,
)
from catalog_search.observability.tracing import create_span, current_trace_ids, get_tracer, init_tracing


__all__ = [
    "DELETED_DOCUMENTS",
    "DOCUMENT_FAILURES",
    "INDEXED_DOCUMENTS",
    "SEARCH_LATENCY",
    "SEARCH_RESULTS",
    "SKIPPED_OPERATIONS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "current_trace_ids",
    "get_metrics",
    "get_operation_context",
    "get_tracer",
    "init_tracing",
    "operation_context",
    "operation_scope",
    "track_latency",
]

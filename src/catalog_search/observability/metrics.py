"""Prometheus metrics for indexing and search."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


INDEXED_DOCUMENTS = Counter(
    "catalog_search_indexed_documents_total",
    "Documents written to the scene index",
    ["operation"],
)

DELETED_DOCUMENTS = Counter(
    "catalog_search_deleted_documents_total",
    "Documents removed from the scene index",
)

DOCUMENT_FAILURES = Counter(
    "catalog_search_document_failures_total",
    "Per-document write or delete failures",
    ["operation"],
)

SKIPPED_OPERATIONS = Counter(
    "catalog_search_skipped_operations_total",
    "Indexing operations skipped because another one held the index lock",
    ["operation"],
)

SEARCH_LATENCY = Histogram(
    "catalog_search_search_latency_seconds",
    "Fuzzy search latency",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

SEARCH_RESULTS = Histogram(
    "catalog_search_search_results",
    "Scenes returned per fuzzy search",
    buckets=(0, 1, 5, 10, 25, 50),
)


@contextmanager
def track_latency(histogram: Histogram) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()

"""Service layer - indexing and search use cases.

Services depend on the record store abstraction, the lock registry and the
index store; they own the error policy (skip on contention, abort on open
failure, continue past per-scene failures, never raise from search).
"""

from .indexing_service import IndexingResult, IndexingService, IndexingStatus
from .search_service import RESULT_FIELDS, SearchService


__all__ = [
    "RESULT_FIELDS",
    "IndexingResult",
    "IndexingService",
    "IndexingStatus",
    "SearchService",
]

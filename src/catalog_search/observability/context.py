"""Operation context propagated into log records."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4


# Thread-safe context for log correlation
operation_context: ContextVar[dict | None] = ContextVar("operation_context", default=None)


def generate_run_id() -> str:
    """Generate a 16-char hex run ID."""
    return uuid4().hex[:16]


def get_operation_context() -> dict:
    """Get the fields of the current operation (empty outside one)."""
    return dict(operation_context.get() or {})


@contextmanager
def operation_scope(task: str, **extra: object) -> Iterator[dict]:
    """Tag every log record emitted inside the block with ``task`` and a run id."""
    ctx = {"task": task, "run_id": generate_run_id(), **extra}
    token = operation_context.set(ctx)
    try:
        yield ctx
    finally:
        operation_context.reset(token)

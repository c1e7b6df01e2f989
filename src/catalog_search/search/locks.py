"""Named, non-blocking locks for exclusive indexing operations.

A ``LockRegistry`` maps lock names to their holders. Acquisition never waits:
a caller that finds the name taken is expected to skip its work. Services get
the registry passed in explicitly, so tests can isolate themselves with a
fresh instance.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading


logger = logging.getLogger(__name__)

INDEX_LOCK_NAME = "index"


@dataclass(frozen=True, slots=True)
class LockLease:
    """Represents a held named lock."""

    name: str
    owner: str
    acquired_at: datetime


class LockRegistry:
    """Process-wide registry of held named locks."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._leases: dict[str, LockLease] = {}

    def try_acquire(self, name: str, owner: str | None = None) -> bool:
        """Take ``name`` if it is free. Returns True iff this call acquired it."""
        with self._guard:
            if name in self._leases:
                return False
            self._leases[name] = LockLease(
                name=name,
                owner=owner or threading.current_thread().name,
                acquired_at=datetime.now(timezone.utc),
            )
            return True

    def release(self, name: str) -> None:
        """Free ``name``; releasing a free lock is a no-op."""
        with self._guard:
            self._leases.pop(name, None)

    def is_held(self, name: str) -> bool:
        with self._guard:
            return name in self._leases

    def lease(self, name: str) -> LockLease | None:
        with self._guard:
            return self._leases.get(name)

    @contextmanager
    def hold(self, name: str, owner: str | None = None) -> Iterator[bool]:
        """Try to take ``name`` for the duration of the block.

        Yields whether the lock was acquired. It is released on every exit
        path, but only if this block acquired it.

        Example:
            with registry.hold("index") as acquired:
                if not acquired:
                    return
                ...
        """
        acquired = self.try_acquire(name, owner)
        if not acquired:
            existing = self.lease(name)
            logger.debug("Lock %s busy (held by %s)", name, existing.owner if existing else "unknown")
        try:
            yield acquired
        finally:
            if acquired:
                self.release(name)

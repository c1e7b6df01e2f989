"""Migration status shared with the indexing pipeline.

While a schema migration runs, the host application surfaces progress to
operators. A full index rebuild is often part of a migration, so the rebuild
forwards its page-level progress here when the flag is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading


@dataclass(slots=True, frozen=True)
class MigrationProgress:
    """Snapshot of the last progress update."""

    phase: str
    current: int
    total: int
    message: str


@dataclass
class MigrationStatus:
    """Process-wide migration flag plus progress updater."""

    is_running: bool = False
    current: str = ""
    _last: MigrationProgress | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def start(self, phase: str) -> None:
        with self._lock:
            self.is_running = True
            self.current = phase
            self._last = MigrationProgress(phase=phase, current=0, total=0, message="")

    def finish(self) -> None:
        with self._lock:
            self.is_running = False

    def update_status(self, phase: str, current: int, total: int, message: str) -> None:
        """Record progress for ``phase``; callers pass the active phase through unchanged."""
        with self._lock:
            self.current = phase
            self._last = MigrationProgress(phase=phase, current=current, total=total, message=message)

    @property
    def last_progress(self) -> MigrationProgress | None:
        with self._lock:
            return self._last

"""Watch set — the runs currently being polled."""

from __future__ import annotations

import threading

from buildsync.engine.types import Run


class WatchSet:
    """Thread-safe set of runs keyed by ``(pipeline, number)``.

    ``snapshot()`` copies under the same lock as ``add`` and ``discard``, so
    a poll tick sees every add or removal that completed before it started.
    Insertion order is kept, so runs are polled oldest first.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._runs: dict[tuple[str, int], Run] = {}

    def add(self, run: Run) -> bool:
        """Track ``run``; False if a run with the same key is already tracked."""
        with self._lock:
            if run.key in self._runs:
                return False
            self._runs[run.key] = run
            return True

    def discard(self, run: Run) -> bool:
        """Stop tracking ``run``; False if it was not tracked."""
        with self._lock:
            return self._runs.pop(run.key, None) is not None

    def snapshot(self) -> list[Run]:
        with self._lock:
            return list(self._runs.values())

    def keys(self) -> list[tuple[str, int]]:
        with self._lock:
            return list(self._runs)

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()

    def __contains__(self, run: Run) -> bool:
        with self._lock:
            return run.key in self._runs

    def __len__(self) -> int:
        with self._lock:
            return len(self._runs)

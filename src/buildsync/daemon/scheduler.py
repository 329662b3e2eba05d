"""Poll scheduler — one recurring timer for the whole process."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger("buildsync.scheduler")

POLL_JOB_ID = "buildsync-poll"


class PollScheduler:
    """Starts the shared poll job at most once.

    The first ``start_once`` call wins; later calls are no-ops, even when they
    race from several threads. ``reset`` shuts the timer down and re-arms the
    flag so tests can start over with a clean scheduler.
    """

    def __init__(self, scheduler: BackgroundScheduler | None = None):
        self._scheduler = scheduler or BackgroundScheduler()
        self._lock = threading.Lock()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler

    def start_once(self, func: Callable[[], None], period_ms: int) -> bool:
        """Schedule ``func`` every ``period_ms``; True only for the call that started it."""
        if period_ms <= 0:
            raise ValueError(f"Poll period must be positive, got {period_ms}ms")

        with self._lock:
            if self._started:
                return False
            self._started = True

            self._scheduler.add_job(
                func,
                trigger=IntervalTrigger(seconds=period_ms / 1000),
                id=POLL_JOB_ID,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            if not self._scheduler.running:
                self._scheduler.start()
        logger.info(f"Poll timer started (every {period_ms}ms)")
        return True

    def shutdown(self) -> None:
        with self._lock:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
                logger.info("Poll timer stopped")

    def reset(self) -> None:
        """Stop the timer and allow ``start_once`` to run again."""
        self.shutdown()
        with self._lock:
            self._scheduler = BackgroundScheduler()
            self._started = False

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "next_run": next_run.isoformat() if next_run else None,
                "trigger": str(job.trigger),
            })
        return jobs

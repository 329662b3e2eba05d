"""Run listener — keeps PipelineActivity records in step with running builds."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

from buildsync.core.formatting import join_paths
from buildsync.core.names import activity_name
from buildsync.daemon.scheduler import PollScheduler
from buildsync.daemon.watch_set import WatchSet
from buildsync.engine.types import Run, RunSample, WorkflowRun
from buildsync.kube.client import ActivityStore, UnprocessableEntityError
from buildsync.services.reconciler import ReconcileResult, reconcile

logger = logging.getLogger("buildsync.listener")


class RunListener(ABC):
    """Lifecycle callbacks the build engine invokes for every run."""

    @abstractmethod
    def on_started(self, run: Run) -> None: ...

    @abstractmethod
    def on_completed(self, run: Run) -> None: ...

    @abstractmethod
    def on_deleted(self, run: Run) -> None: ...

    @abstractmethod
    def on_finalized(self, run: Run) -> None: ...


class BuildSyncRunListener(RunListener):
    """Polls running workflow runs and upserts their PipelineActivity.

    Started runs join the watch set and the shared poll timer is started on
    first use. Each tick reconciles every watched run in turn. Completion,
    deletion and finalization drop the run and reconcile it one last time so
    the terminal state is recorded without waiting for a tick.

    All watch set changes and reconciliation passes run under one re-entrant
    lock, so passes for a run never interleave.
    """

    def __init__(
        self,
        store: ActivityStore,
        scheduler: PollScheduler | None = None,
        poll_period_ms: int = 1000,
        namespace: str | Callable[[], str] = "jx",
        build_engine_url: str | None = None,
    ):
        self.store = store
        self.scheduler = scheduler or PollScheduler()
        self.poll_period_ms = poll_period_ms
        self.build_engine_url = build_engine_url
        self.runs_to_poll = WatchSet()
        self._namespace = namespace
        self._lock = threading.RLock()

    @property
    def namespace(self) -> str:
        return self._namespace() if callable(self._namespace) else self._namespace

    def should_poll_run(self, run: Run) -> bool:
        """Only pipeline-style runs have a stage view worth mirroring."""
        return isinstance(run, WorkflowRun)

    def watched(self) -> list[dict]:
        return [{"pipeline": pipeline, "build": number} for pipeline, number in self.runs_to_poll.keys()]

    # ─── Lifecycle callbacks ───

    def on_started(self, run: Run) -> None:
        with self._lock:
            if not self.should_poll_run(run):
                logger.debug(f"Not polling {run.display_name} as it is not a workflow run")
                return
            if self.runs_to_poll.add(run):
                logger.info(f"Starting polling build {run.display_name}")
            self.check_timer_started()

    def on_completed(self, run: Run) -> None:
        self._stop_polling(run)

    def on_deleted(self, run: Run) -> None:
        self._stop_polling(run)

    def on_finalized(self, run: Run) -> None:
        self._stop_polling(run)

    def _stop_polling(self, run: Run) -> None:
        with self._lock:
            if not self.should_poll_run(run):
                return
            self.runs_to_poll.discard(run)
            self.poll_run(run)

    # ─── Polling ───

    def check_timer_started(self) -> bool:
        return self.scheduler.start_once(self.poll_loop, self.poll_period_ms)

    def poll_loop(self) -> None:
        """One timer tick: reconcile every watched run, isolating failures."""
        with self._lock:
            for run in self.runs_to_poll.snapshot():
                try:
                    self.poll_run(run)
                except Exception:
                    logger.exception(f"Failed to update pipeline activity for {run.display_name}")

    def poll_run(self, run: Run) -> ReconcileResult | None:
        """Reconcile one run; returns None when the store rejected the record."""
        if not isinstance(run, WorkflowRun):
            raise ValueError(f"Cannot poll a non-workflow run: {run!r}")

        with self._lock:
            try:
                return self.upsert_build(run.sample())
            except UnprocessableEntityError as e:
                self.runs_to_poll.discard(run)
                logger.warning(f"Cannot update status of {run.display_name}: {e.message}")
                return None

    def upsert_build(self, sample: RunSample) -> ReconcileResult:
        namespace = self.namespace
        name = activity_name(sample.pipeline, sample.number)

        existing = self.store.get(namespace, name)
        result = reconcile(existing, sample, build_url=self._build_url(sample))
        if result.changed:
            self.store.create_or_replace(namespace, result.activity)
            logger.info(f"{'Created' if result.created else 'Updated'} pipeline activity {name}")
        return result

    def _build_url(self, sample: RunSample) -> str | None:
        if not sample.url:
            return None
        if sample.url.startswith(("http://", "https://")):
            return sample.url
        if self.build_engine_url:
            return join_paths(self.build_engine_url, sample.url)
        return None

    def shutdown(self) -> None:
        self.scheduler.shutdown()

"""Run lifecycle API endpoints — the build engine notifies the daemon here."""

from __future__ import annotations

import logging
from typing import Callable

import httpx
from fastapi import APIRouter, Depends, HTTPException

from buildsync.core.auth import verify_api_key
from buildsync.daemon.listener import BuildSyncRunListener
from buildsync.engine.types import Run, WorkflowRun
from buildsync.kube.client import KubernetesClientError
from buildsync.schemas.event import RunEvent, RunEventResponse, WatchListResponse

logger = logging.getLogger("buildsync.api")

router = APIRouter(tags=["events"])

# Listener and run factory are initialized by the daemon on startup
_listener: BuildSyncRunListener | None = None
_run_factory: Callable[[str, int], WorkflowRun] | None = None


def set_listener(listener: BuildSyncRunListener | None, run_factory: Callable[[str, int], WorkflowRun] | None = None):
    global _listener, _run_factory
    _listener = listener
    _run_factory = run_factory


def get_listener() -> BuildSyncRunListener | None:
    return _listener


def _make_run(event: RunEvent) -> Run:
    if event.kind != "workflow":
        return Run(event.pipeline, event.build, kind=event.kind)
    if _run_factory is None:
        raise HTTPException(503, "Build engine client not initialized")
    return _run_factory(event.pipeline, event.build)


@router.post("/events", response_model=RunEventResponse)
def post_event(event: RunEvent, _: str = Depends(verify_api_key)):
    """Deliver a run lifecycle notification to the listener."""
    if _listener is None:
        raise HTTPException(503, "Run listener not initialized")

    run = _make_run(event)
    callbacks = {
        "started": _listener.on_started,
        "completed": _listener.on_completed,
        "deleted": _listener.on_deleted,
        "finalized": _listener.on_finalized,
    }
    try:
        callbacks[event.event](run)
    except (KubernetesClientError, httpx.HTTPError) as e:
        logger.error(f"Failed to handle {event.event} for {run.display_name}: {e}")
        raise HTTPException(502, str(e))

    return RunEventResponse(
        event=event.event,
        pipeline=event.pipeline,
        build=event.build,
        watched=run in _listener.runs_to_poll,
    )


@router.get("/watches", response_model=WatchListResponse)
def list_watches(_: str = Depends(verify_api_key)):
    """List runs currently being polled."""
    if _listener is None:
        return WatchListResponse(runs=[], total=0)
    runs = _listener.watched()
    return WatchListResponse(runs=runs, total=len(runs))

"""Status mapper — translates build engine status codes into ActivityStatus."""

from __future__ import annotations

import logging

from buildsync.engine.types import RunResult, RunSample, StageStatus
from buildsync.models.status import ActivityStatus

logger = logging.getLogger("buildsync.status")

# UNSTABLE builds count as failed pipelines, while UNSTABLE stages keep their own status.
RUN_RESULT_STATUS = {
    RunResult.SUCCESS.value: ActivityStatus.SUCCEEDED,
    RunResult.ABORTED.value: ActivityStatus.ABORTED,
    RunResult.FAILURE.value: ActivityStatus.FAILED,
    RunResult.UNSTABLE.value: ActivityStatus.FAILED,
}

# IN_PROGRESS stages are reported as Pending, not Running.
STAGE_STATUS = {
    StageStatus.ABORTED.value: ActivityStatus.ABORTED,
    StageStatus.NOT_EXECUTED.value: ActivityStatus.NOT_EXECUTED,
    StageStatus.SUCCESS.value: ActivityStatus.SUCCEEDED,
    StageStatus.IN_PROGRESS.value: ActivityStatus.PENDING,
    StageStatus.PAUSED_PENDING_INPUT.value: ActivityStatus.WAITING_FOR_APPROVAL,
    StageStatus.FAILED.value: ActivityStatus.FAILED,
    StageStatus.UNSTABLE.value: ActivityStatus.UNSTABLE,
}


def _code(value) -> str | None:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


def map_run_status(run: RunSample | None) -> ActivityStatus:
    """Pipeline-level status of a run sample."""
    if run is None or run.has_not_started_yet:
        return ActivityStatus.UNSET
    if run.building:
        return ActivityStatus.RUNNING

    result = _code(run.result)
    if result is None:
        return ActivityStatus.UNSET
    return RUN_RESULT_STATUS.get(result, ActivityStatus.PENDING)


def map_stage_status(status: StageStatus | str | None) -> ActivityStatus:
    """Stage-level status for a stage view status code."""
    code = _code(status)
    if code is None:
        return ActivityStatus.UNSET
    mapped = STAGE_STATUS.get(code)
    if mapped is None:
        logger.debug(f"Unknown stage status {code!r}")
        return ActivityStatus.UNSET
    return mapped

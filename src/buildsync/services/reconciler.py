"""Merge sampled run state into a PipelineActivity record.

Fields are filled, not recomputed: timestamps and identity are written only
while blank, and ``status`` is the one field refreshed on every pass. Change
detection compares a canonical YAML rendering of the spec before and after
the merge, so writes only happen when something visible changed.
"""

from __future__ import annotations

import logging
import uuid
from typing import NamedTuple, Sequence

import yaml

from buildsync.core.formatting import format_timestamp, join_paths, to_yaml
from buildsync.core.names import activity_name
from buildsync.engine.types import RunSample, StageSample
from buildsync.models.activity import PipelineActivity, PipelineActivitySpec
from buildsync.models.status import is_terminal
from buildsync.services.status_mapper import map_run_status, map_stage_status

logger = logging.getLogger("buildsync.reconciler")


class ReconcileResult(NamedTuple):
    activity: PipelineActivity
    changed: bool
    created: bool


def snapshot(spec: PipelineActivitySpec) -> str:
    """Comparable text for a spec; a random token if it cannot be rendered."""
    try:
        return to_yaml(spec.model_dump(mode="json", by_alias=True, exclude_none=True))
    except (yaml.YAMLError, ValueError, TypeError) as e:
        logger.warning(f"Could not marshal {type(spec).__name__} to YAML: {e}")
        return uuid.uuid4().hex


def reconcile(
    existing: PipelineActivity | None,
    run: RunSample,
    stages: Sequence[StageSample] | None = None,
    build_url: str | None = None,
) -> ReconcileResult:
    """Merge ``run`` into ``existing`` (or a new record) and report whether it changed.

    ``existing`` is updated in place and returned. Calling this twice with
    the same sample yields ``changed=False`` the second time.
    """
    if stages is None:
        stages = run.stages

    created = existing is None
    activity = existing
    if activity is None:
        activity = PipelineActivity.new(activity_name(run.pipeline, run.number))
    if activity.spec is None:
        activity.spec = PipelineActivitySpec()
    spec = activity.spec

    before = "" if created else snapshot(spec)

    status = map_run_status(run)
    spec.status = status.value

    if spec.is_blank("started_timestamp") and run.start_time_millis > 0:
        spec.started_timestamp = format_timestamp(run.start_time_millis)
    if (
        spec.is_blank("completed_timestamp")
        and is_terminal(status)
        and run.start_time_millis > 0
        and run.duration_millis > 0
    ):
        spec.completed_timestamp = format_timestamp(run.start_time_millis + run.duration_millis)

    if spec.is_blank("pipeline"):
        spec.pipeline = run.pipeline
    if spec.is_blank("build"):
        spec.build = str(run.number)
    if build_url:
        if spec.is_blank("build_url"):
            spec.build_url = build_url
        if spec.is_blank("build_logs_url"):
            spec.build_logs_url = join_paths(build_url, "console")

    for index, stage in enumerate(stages):
        stage_status = map_stage_status(stage.status)
        step = spec.get_or_create_stage(index)
        step.status = stage_status.value
        step.name = stage.name
        if step.is_blank("started_timestamp") and stage.start_time_millis > 0:
            step.started_timestamp = format_timestamp(stage.start_time_millis)
        if (
            step.is_blank("completed_timestamp")
            and is_terminal(stage_status)
            and stage.start_time_millis > 0
        ):
            step.completed_timestamp = format_timestamp(stage.start_time_millis + stage.duration_millis)

    after = "" if created else snapshot(spec)
    changed = created or before != after
    return ReconcileResult(activity, changed, created)

"""Build engine boundary — run handles, samples and status codes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RunResult(str, Enum):
    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"


class StageStatus(str, Enum):
    NOT_EXECUTED = "NOT_EXECUTED"
    ABORTED = "ABORTED"
    SUCCESS = "SUCCESS"
    IN_PROGRESS = "IN_PROGRESS"
    PAUSED_PENDING_INPUT = "PAUSED_PENDING_INPUT"
    FAILED = "FAILED"
    UNSTABLE = "UNSTABLE"


@dataclass(frozen=True)
class StageSample:
    name: str
    status: StageStatus | str | None = None
    start_time_millis: int = 0
    duration_millis: int = 0

    @classmethod
    def from_wfapi(cls, data: dict[str, Any]) -> StageSample:
        """Build from a stage entry of the pipeline stage view ``wfapi/describe`` payload."""
        return cls(
            name=data.get("name", ""),
            status=data.get("status"),
            start_time_millis=data.get("startTimeMillis") or 0,
            duration_millis=data.get("durationMillis") or 0,
        )


@dataclass(frozen=True)
class RunSample:
    """Point-in-time view of a run, taken once per reconciliation pass."""

    pipeline: str
    number: int
    start_time_millis: int = 0
    duration_millis: int = 0
    building: bool = False
    has_not_started_yet: bool = False
    result: RunResult | str | None = None
    url: str | None = None
    stages: tuple[StageSample, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunSample:
        """Build from a plain snapshot document (as written by hand or exported)."""
        if not isinstance(data, dict):
            raise ValueError(f"Run snapshot must be a mapping, got {type(data).__name__}")
        stages = tuple(
            StageSample(
                name=s["name"],
                status=s.get("status"),
                start_time_millis=s.get("start_time_millis", 0),
                duration_millis=s.get("duration_millis", 0),
            )
            for s in data.get("stages") or []
        )
        return cls(
            pipeline=data["pipeline"],
            number=int(data["number"]),
            start_time_millis=data.get("start_time_millis", 0),
            duration_millis=data.get("duration_millis", 0),
            building=data.get("building", False),
            has_not_started_yet=data.get("has_not_started_yet", False),
            result=data.get("result"),
            url=data.get("url"),
            stages=stages,
        )


class Run:
    """Handle for one execution of a job in the build engine.

    Handles are compared by ``(pipeline, number)`` so notifications that
    carry fresh handle objects still refer to the same watched run.
    """

    kind = "run"

    def __init__(self, pipeline: str, number: int, kind: str | None = None):
        self.pipeline = pipeline
        self.number = int(number)
        if kind is not None:
            self.kind = kind

    @property
    def key(self) -> tuple[str, int]:
        return (self.pipeline, self.number)

    @property
    def display_name(self) -> str:
        return f"{self.pipeline} #{self.number}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Run):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pipeline!r}, {self.number})"


class WorkflowRun(Run, ABC):
    """A pipeline-style run with a stage view; the only kind that gets watched."""

    kind = "workflow"

    @abstractmethod
    def sample(self) -> RunSample:
        """Read the current run and stage state."""
        ...


class StaticWorkflowRun(WorkflowRun):
    """Workflow run backed by a fixed sample, replaced with ``update``."""

    def __init__(self, sample: RunSample):
        super().__init__(sample.pipeline, sample.number)
        self._sample = sample

    def update(self, sample: RunSample) -> None:
        if (sample.pipeline, sample.number) != self.key:
            raise ValueError(f"Sample for {sample.pipeline} #{sample.number} does not belong to {self.display_name}")
        self._sample = sample

    def sample(self) -> RunSample:
        return self._sample

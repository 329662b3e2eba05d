"""Build engine boundary — run handles and the Jenkins adapter."""

from buildsync.engine.types import (
    Run,
    RunResult,
    RunSample,
    StageSample,
    StageStatus,
    StaticWorkflowRun,
    WorkflowRun,
)
from buildsync.engine.jenkins import JenkinsClient, JenkinsWorkflowRun

__all__ = [
    "Run",
    "RunResult",
    "RunSample",
    "StageSample",
    "StageStatus",
    "StaticWorkflowRun",
    "WorkflowRun",
    "JenkinsClient",
    "JenkinsWorkflowRun",
]

"""PipelineActivity resource model.

Mirrors the ``jenkins.io/v1`` ``PipelineActivity`` custom resource. Field names
are snake_case in Python and camelCase on the wire. Unknown fields coming back
from the cluster are kept so a read-modify-write never drops data written by
other tools.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

API_VERSION = "jenkins.io/v1"
KIND = "PipelineActivity"
PLURAL = "pipelineactivities"

STEP_KIND_STAGE = "stage"


class ActivityModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "allow"}

    def is_blank(self, field: str) -> bool:
        """True if ``field`` is unset or whitespace only; write-once fields are filled only then."""
        value = getattr(self, field)
        if value is None:
            return True
        return isinstance(value, str) and not value.strip()


class ObjectMeta(ActivityModel):
    name: str | None = None
    namespace: str | None = None
    resource_version: str | None = None
    uid: str | None = None
    creation_timestamp: str | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


class CoreActivityStep(ActivityModel):
    name: str | None = None
    description: str | None = None
    status: str | None = None
    started_timestamp: str | None = None
    completed_timestamp: str | None = None


class StageActivityStep(CoreActivityStep):
    steps: list[CoreActivityStep] | None = None


class PromotePullRequestStep(CoreActivityStep):
    pull_request_url: str | None = Field(default=None, alias="pullRequestURL")
    merge_commit_sha: str | None = Field(default=None, alias="mergeCommitSHA")


class PromoteUpdateStep(CoreActivityStep):
    statuses: list[dict[str, Any]] | None = None


class PromoteActivityStep(CoreActivityStep):
    environment: str | None = None
    application_url: str | None = Field(default=None, alias="applicationURL")
    pull_request: PromotePullRequestStep | None = None
    update: PromoteUpdateStep | None = None


class PipelineActivityStep(ActivityModel):
    kind: str | None = None
    stage: StageActivityStep | None = None
    promote: PromoteActivityStep | None = None
    preview: dict[str, Any] | None = None


class PipelineActivitySpec(ActivityModel):
    pipeline: str | None = None
    build: str | None = None
    version: str | None = None
    status: str | None = None
    started_timestamp: str | None = None
    completed_timestamp: str | None = None
    build_url: str | None = None
    build_logs_url: str | None = None
    git_url: str | None = None
    git_repository: str | None = None
    git_owner: str | None = None
    author: str | None = None
    release_notes_url: str | None = Field(default=None, alias="releaseNotesURL")
    last_commit_sha: str | None = Field(default=None, alias="lastCommitSHA")
    last_commit_message: str | None = None
    last_commit_url: str | None = Field(default=None, alias="lastCommitURL")
    steps: list[PipelineActivityStep] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def _null_steps(cls, value: Any) -> Any:
        return [] if value is None else value

    def stages(self) -> list[StageActivityStep]:
        """Stage payloads in step order, skipping promote/preview steps."""
        return [step.stage for step in self.steps if step.stage is not None]

    def get_or_create_stage(self, index: int) -> StageActivityStep:
        """Return the ``index``-th stage slot, appending empty stage steps up to it.

        Existing steps keep their identity and position; new slots always go
        at the end of the step list.
        """
        if index < 0:
            raise IndexError(f"Stage index must not be negative: {index}")

        stages = self.stages()
        if index < len(stages):
            return stages[index]

        answer = None
        for _ in range(len(stages), index + 1):
            answer = StageActivityStep()
            self.steps.append(PipelineActivityStep(kind=STEP_KIND_STAGE, stage=answer))
        return answer


class PipelineActivity(ActivityModel):
    api_version: str = API_VERSION
    kind: str = KIND
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PipelineActivitySpec | None = None

    @classmethod
    def new(cls, name: str, namespace: str | None = None) -> PipelineActivity:
        return cls(metadata=ObjectMeta(name=name, namespace=namespace), spec=PipelineActivitySpec())

    @classmethod
    def from_resource(cls, data: dict[str, Any]) -> PipelineActivity:
        return cls.model_validate(data)

    @property
    def name(self) -> str | None:
        return self.metadata.name

    def to_resource(self) -> dict[str, Any]:
        """Wire form: camelCase keys, unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

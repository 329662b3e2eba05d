"""Jenkins adapter — samples pipeline runs over the Jenkins REST API."""

from __future__ import annotations

import logging

import httpx

from buildsync.core.formatting import join_paths
from buildsync.engine.types import RunSample, StageSample, WorkflowRun

logger = logging.getLogger("buildsync.engine.jenkins")

BUILD_TREE = "number,building,result,timestamp,duration,url"


class JenkinsClient:
    """Reads build and stage state from a Jenkins controller.

    Run state comes from ``<run>/api/json``, stage state from the pipeline
    stage view endpoint ``<run>/wfapi/describe``.
    """

    def __init__(
        self,
        base_url: str,
        user: str | None = None,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        auth = (user, token) if user and token else None
        self._client = httpx.Client(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    @staticmethod
    def run_path(full_name: str, number: int) -> str:
        """Relative URL of a run, e.g. ``job/org/job/repo/job/main/42/``."""
        segments = [f"job/{part}" for part in full_name.split("/") if part]
        return join_paths(*segments, str(number), "")

    def get_run(self, full_name: str, number: int) -> JenkinsWorkflowRun:
        return JenkinsWorkflowRun(self, full_name, number)

    def fetch_sample(self, full_name: str, number: int) -> RunSample:
        path = self.run_path(full_name, number)

        resp = self._client.get(f"/{path}api/json", params={"tree": BUILD_TREE})
        resp.raise_for_status()
        build = resp.json()

        resp = self._client.get(f"/{path}wfapi/describe")
        resp.raise_for_status()
        describe = resp.json()

        building = bool(build.get("building", False))
        result = build.get("result")
        stages = tuple(StageSample.from_wfapi(s) for s in describe.get("stages") or [])
        logger.debug(f"Sampled {full_name} #{number}: building={building} result={result} stages={len(stages)}")

        return RunSample(
            pipeline=full_name,
            number=number,
            start_time_millis=describe.get("startTimeMillis") or build.get("timestamp") or 0,
            duration_millis=build.get("duration") or 0,
            building=building,
            has_not_started_yet=not building and result is None,
            result=result,
            url=build.get("url") or path,
            stages=stages,
        )


class JenkinsWorkflowRun(WorkflowRun):
    """Live handle on a Jenkins pipeline run; every ``sample()`` hits the API."""

    def __init__(self, client: JenkinsClient, full_name: str, number: int):
        super().__init__(full_name, number)
        self._client = client

    def sample(self) -> RunSample:
        return self._client.fetch_sample(self.pipeline, self.number)

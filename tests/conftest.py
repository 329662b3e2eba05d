"""Shared test fixtures for buildsync tests."""

import copy
import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from buildsync.api.events import set_listener
from buildsync.daemon.listener import BuildSyncRunListener
from buildsync.daemon.main import create_app
from buildsync.daemon.scheduler import PollScheduler
from buildsync.engine.types import RunSample, StageSample, StaticWorkflowRun
from buildsync.kube.client import ActivityStore
from buildsync.models.activity import PipelineActivity


class InMemoryActivityStore(ActivityStore):
    """Stores wire-form resources so every get() returns a fresh copy, like a real API server."""

    def __init__(self):
        self.resources: dict[tuple[str, str], dict] = {}
        self.writes: list[tuple[str, str]] = []
        self.fail_with: dict[str, Exception] = {}
        self._version = 0

    def get(self, namespace, name):
        data = self.resources.get((namespace, name))
        if data is None:
            return None
        return PipelineActivity.from_resource(copy.deepcopy(data))

    def create_or_replace(self, namespace, activity):
        if activity.name in self.fail_with:
            raise self.fail_with[activity.name]
        self._version += 1
        data = activity.to_resource()
        data["metadata"]["resourceVersion"] = str(self._version)
        self.resources[(namespace, activity.name)] = data
        self.writes.append((namespace, activity.name))
        return PipelineActivity.from_resource(copy.deepcopy(data))


def make_sample(
    pipeline="org/repo/main",
    number=1,
    start=1000,
    duration=0,
    building=True,
    not_started=False,
    result=None,
    stages=(),
    url=None,
) -> RunSample:
    return RunSample(
        pipeline=pipeline,
        number=number,
        start_time_millis=start,
        duration_millis=duration,
        building=building,
        has_not_started_yet=not_started,
        result=result,
        url=url,
        stages=tuple(stages),
    )


def stage(name, status, start=2000, duration=0) -> StageSample:
    return StageSample(name=name, status=status, start_time_millis=start, duration_millis=duration)


@pytest.fixture
def store():
    return InMemoryActivityStore()


@pytest.fixture
def scheduler():
    sched = PollScheduler()
    yield sched
    sched.reset()


@pytest.fixture
def listener(store, scheduler):
    # Long period so the timer never fires during a test; ticks are driven by hand
    return BuildSyncRunListener(
        store=store,
        scheduler=scheduler,
        poll_period_ms=3_600_000,
        namespace="jx",
        build_engine_url="http://jenkins.example.com",
    )


@pytest.fixture
def run_factory():
    """Hands out StaticWorkflowRuns and remembers them so tests can advance their state."""
    runs: dict[tuple[str, int], StaticWorkflowRun] = {}

    def factory(pipeline: str, number: int) -> StaticWorkflowRun:
        key = (pipeline, number)
        if key not in runs:
            runs[key] = StaticWorkflowRun(make_sample(pipeline=pipeline, number=number))
        return runs[key]

    factory.runs = runs
    return factory


@pytest_asyncio.fixture(scope="function")
async def app(listener, run_factory):
    os.environ["BUILDSYNC_API_KEY"] = "test_key"
    _app = create_app()
    set_listener(listener, run_factory)
    yield _app
    set_listener(None)


@pytest_asyncio.fixture(scope="function")
async def client(app):
    """Async HTTP client pointed at the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": "Bearer test_key"},
    ) as c:
        yield c


@pytest_asyncio.fixture(scope="function")
async def unauthed_client(app):
    """Async HTTP client without auth."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

"""buildsync daemon — FastAPI app receiving run events and polling active builds."""

import logging
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI

from buildsync import __version__
from buildsync.core.config import get_settings
from buildsync.api.router import api_router
from buildsync.api.events import set_listener, get_listener
from buildsync.daemon.listener import BuildSyncRunListener
from buildsync.daemon.scheduler import PollScheduler
from buildsync.engine.jenkins import JenkinsClient
from buildsync.kube.client import KubernetesActivityClient

logger = logging.getLogger("buildsync")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown."""
    settings = get_settings()

    store = KubernetesActivityClient(
        api_url=settings.kube_api_url,
        token=settings.resolve_kube_token(),
        ca_file=settings.kube_ca_file,
        verify_ssl=settings.kube_verify_ssl,
        timeout=settings.request_timeout,
    )
    jenkins = JenkinsClient(
        base_url=settings.jenkins_url,
        user=settings.jenkins_user,
        token=settings.jenkins_token,
        timeout=settings.request_timeout,
    )
    logger.info(f"Cluster API: {settings.kube_api_url} (namespace={settings.namespace})")
    logger.info(f"Build engine: {settings.jenkins_url}")

    listener = BuildSyncRunListener(
        store=store,
        scheduler=PollScheduler(),
        poll_period_ms=settings.poll_period_ms,
        namespace=lambda: get_settings().namespace,
        build_engine_url=settings.jenkins_url,
    )
    set_listener(listener, jenkins.get_run)

    yield

    # Shutdown
    listener.shutdown()
    set_listener(None)
    jenkins.close()
    store.close()
    logger.info("buildsync daemon stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="buildsync",
        description="Mirrors build pipeline progress into PipelineActivity resources",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(api_router)

    @app.get("/health")
    async def health():
        listener = get_listener()
        return {
            "status": "ok",
            "version": __version__,
            "scheduler_jobs": listener.scheduler.list_jobs() if listener else [],
            "watched": listener.watched() if listener else [],
        }

    return app


def main():
    """Entry point for `buildsyncd` command."""
    import sys

    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    host = settings.host
    port = settings.port

    # Parse CLI args (simple, no dep on typer for daemon)
    args = sys.argv[1:]
    for i, arg in enumerate(args):
        if arg == "--port" and i + 1 < len(args):
            port = int(args[i + 1])
        if arg == "--host" and i + 1 < len(args):
            host = args[i + 1]

    logger.info(f"Starting buildsync daemon v{__version__} on {host}:{port}")

    app = create_app()
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level)


if __name__ == "__main__":
    main()

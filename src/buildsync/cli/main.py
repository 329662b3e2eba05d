"""buildsync CLI — talks to the daemon and the cluster over HTTP."""

from pathlib import Path

import httpx
import typer
import yaml
from rich.console import Console
from rich.table import Table
from rich.syntax import Syntax

from buildsync import __version__
from buildsync.core.config import get_client_settings, get_settings
from buildsync.core.formatting import to_yaml
from buildsync.core.names import activity_name
from buildsync.engine.types import RunSample
from buildsync.kube.client import KubernetesActivityClient, KubernetesClientError
from buildsync.services.reconciler import reconcile

app = typer.Typer(
    name="buildsync",
    help="Mirror CI/CD pipeline runs into PipelineActivity resources",
    no_args_is_help=True,
)
console = Console()


def _client() -> httpx.Client:
    settings = get_client_settings()
    return httpx.Client(
        base_url=settings.host,
        headers={"Authorization": f"Bearer {settings.api_key}"},
        timeout=30,
    )


def _api(method: str, path: str, **kwargs) -> dict:
    """Make an API call to the daemon."""
    with _client() as client:
        try:
            resp = client.request(method, f"/api/v1{path}", **kwargs)
        except httpx.ConnectError:
            settings = get_client_settings()
            console.print(f"[red]Error:[/red] Cannot connect to buildsync daemon at {settings.host}")
            console.print("Start the daemon with: [bold]buildsyncd[/bold]")
            raise typer.Exit(1)

        if resp.status_code >= 400:
            detail = resp.json().get("detail", resp.text) if resp.headers.get("content-type", "").startswith("application/json") else resp.text
            console.print(f"[red]Error {resp.status_code}:[/red] {detail}")
            raise typer.Exit(1)

        return resp.json()


def _store() -> KubernetesActivityClient:
    settings = get_settings()
    return KubernetesActivityClient(
        api_url=settings.kube_api_url,
        token=settings.resolve_kube_token(),
        ca_file=settings.kube_ca_file,
        verify_ssl=settings.kube_verify_ssl,
        timeout=settings.request_timeout,
    )


def _print_yaml(data: dict) -> None:
    console.print(Syntax(to_yaml(data), "yaml", theme="monokai"))


# ─── Daemon Commands ───


@app.command()
def notify(
    event: str = typer.Argument(..., help="started, completed, deleted or finalized"),
    pipeline: str = typer.Argument(..., help="Pipeline (job) full name"),
    build: int = typer.Argument(..., help="Build number"),
    kind: str = typer.Option("workflow", "--kind", "-k", help="Run kind"),
):
    """Send a run lifecycle event to the daemon."""
    result = _api("POST", "/events", json={"event": event, "pipeline": pipeline, "build": build, "kind": kind})
    state = "[green]watched[/green]" if result["watched"] else "[dim]not watched[/dim]"
    console.print(f"[green]✓[/green] {event}: [bold]{pipeline} #{build}[/bold] — {state}")


@app.command()
def watches():
    """List runs the daemon is polling."""
    result = _api("GET", "/watches")
    if not result["runs"]:
        console.print("[dim]No runs being polled[/dim]")
        return

    table = Table(title="Watched runs")
    table.add_column("Pipeline", style="bold")
    table.add_column("Build")
    table.add_column("Activity")
    for r in result["runs"]:
        table.add_row(r["pipeline"], str(r["build"]), activity_name(r["pipeline"], r["build"]))
    console.print(table)


@app.command()
def status():
    """Show daemon status."""
    with _client() as client:
        try:
            resp = client.get("/health")
            data = resp.json()
            console.print(f"[green]●[/green] buildsync daemon v{data['version']} — running")
            jobs = data.get("scheduler_jobs", [])
            if jobs:
                for j in jobs:
                    console.print(f"  {j['id']} → next: {j.get('next_run', '—')}")
            else:
                console.print("  Poll timer not started")
            console.print(f"  Watched runs: {len(data.get('watched', []))}")
        except httpx.ConnectError:
            settings = get_client_settings()
            console.print(f"[red]●[/red] Daemon not running at {settings.host}")


# ─── Cluster Commands ───


@app.command()
def sync(
    file: Path = typer.Argument(..., help="Run snapshot (YAML or JSON)"),
    namespace: str = typer.Option(None, "--namespace", "-n", help="Target namespace"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the record instead of writing it"),
):
    """Reconcile a run snapshot file into its PipelineActivity once."""
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    try:
        sample = RunSample.from_dict(yaml.safe_load(file.read_text()))
    except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        console.print(f"[red]Error:[/red] Invalid run snapshot {file}: {e}")
        raise typer.Exit(1)

    ns = namespace or get_settings().namespace
    name = activity_name(sample.pipeline, sample.number)
    try:
        with _store() as store:
            result = reconcile(store.get(ns, name), sample)
            if dry_run:
                _print_yaml(result.activity.to_resource())
                return
            if result.changed:
                store.create_or_replace(ns, result.activity)
    except (KubernetesClientError, httpx.HTTPError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not result.changed:
        console.print(f"[dim]No changes for {name}[/dim]")
    else:
        action = "Created" if result.created else "Updated"
        console.print(f"[green]✓[/green] {action} pipeline activity [bold]{name}[/bold] ({result.activity.spec.status or 'no status'})")


@app.command()
def show(
    pipeline: str = typer.Argument(..., help="Pipeline (job) full name"),
    build: int = typer.Argument(..., help="Build number"),
    namespace: str = typer.Option(None, "--namespace", "-n", help="Namespace"),
):
    """Show the stored PipelineActivity for a build."""
    ns = namespace or get_settings().namespace
    name = activity_name(pipeline, build)
    try:
        with _store() as store:
            activity = store.get(ns, name)
    except (KubernetesClientError, httpx.HTTPError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if activity is None:
        console.print(f"[red]Error:[/red] PipelineActivity {name} not found in {ns}")
        raise typer.Exit(1)
    _print_yaml(activity.to_resource())


@app.command()
def name(
    pipeline: str = typer.Argument(..., help="Pipeline (job) full name"),
    build: int = typer.Argument(..., help="Build number"),
):
    """Print the PipelineActivity name for a build."""
    console.print(activity_name(pipeline, build))


@app.command()
def version():
    """Show buildsync version."""
    console.print(f"buildsync v{__version__}")


if __name__ == "__main__":
    app()

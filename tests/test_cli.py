"""Tests for the buildsync CLI."""

import contextlib

import pytest
import yaml
from typer.testing import CliRunner

import buildsync.cli.main as cli_main
from buildsync.cli.main import app

runner = CliRunner()

SNAPSHOT = {
    "pipeline": "org/repo/main",
    "number": 12,
    "start_time_millis": 1_500_000_000_000,
    "duration_millis": 90_000,
    "building": False,
    "result": "SUCCESS",
    "stages": [
        {"name": "Build", "status": "SUCCESS", "start_time_millis": 1_500_000_000_000, "duration_millis": 60_000},
    ],
}


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(SNAPSHOT))
    return path


@pytest.fixture
def cli_store(store, monkeypatch):
    monkeypatch.setattr(cli_main, "_store", lambda: contextlib.nullcontext(store))
    monkeypatch.setenv("BUILDSYNC_NAMESPACE", "ci")
    return store


class TestCommands:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "buildsync v" in result.output

    def test_name(self):
        result = runner.invoke(app, ["name", "Org/Repo/main", "3"])
        assert result.exit_code == 0
        assert result.output.strip() == "org-repo-main-3"

    def test_sync_creates(self, snapshot_file, cli_store):
        result = runner.invoke(app, ["sync", str(snapshot_file)])
        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        activity = cli_store.get("ci", "org-repo-main-12")
        assert activity.spec.status == "Succeeded"
        assert activity.spec.steps[0].stage.name == "Build"

        again = runner.invoke(app, ["sync", str(snapshot_file)])
        assert again.exit_code == 0
        assert "No changes" in again.output
        assert len(cli_store.writes) == 1

    def test_sync_dry_run(self, snapshot_file, cli_store):
        result = runner.invoke(app, ["sync", str(snapshot_file), "--dry-run", "--namespace", "other"])
        assert result.exit_code == 0, result.output
        assert "org-repo-main-12" in result.output
        assert cli_store.writes == []

    def test_sync_missing_file(self, tmp_path, cli_store):
        result = runner.invoke(app, ["sync", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_sync_invalid_snapshot(self, tmp_path, cli_store):
        path = tmp_path / "bad.yaml"
        path.write_text("number: 3\n")
        result = runner.invoke(app, ["sync", str(path)])
        assert result.exit_code == 1
        assert "Invalid run snapshot" in result.output

    @pytest.mark.parametrize("content", ["", "- just\n- a list\n"])
    def test_sync_non_mapping_snapshot(self, tmp_path, cli_store, content):
        path = tmp_path / "run.yaml"
        path.write_text(content)
        result = runner.invoke(app, ["sync", str(path)])
        assert result.exit_code == 1
        assert "Invalid run snapshot" in result.output
        assert cli_store.writes == []

    def test_show_missing(self, cli_store):
        result = runner.invoke(app, ["show", "org/repo/main", "99"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_notify(self, monkeypatch):
        calls = []

        def fake_api(method, path, **kwargs):
            calls.append((method, path, kwargs["json"]))
            return {"event": "started", "pipeline": "org/repo/main", "build": 4, "watched": True}

        monkeypatch.setattr(cli_main, "_api", fake_api)
        result = runner.invoke(app, ["notify", "started", "org/repo/main", "4"])
        assert result.exit_code == 0
        assert calls == [("POST", "/events", {"event": "started", "pipeline": "org/repo/main", "build": 4, "kind": "workflow"})]
        assert "watched" in result.output

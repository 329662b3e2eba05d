"""Tests for settings loading."""

from buildsync.core.config import BuildSyncSettings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDSYNC_HOME", str(tmp_path / "home"))
        monkeypatch.delenv("BUILDSYNC_NAMESPACE", raising=False)
        monkeypatch.delenv("BUILDSYNC_POLL_PERIOD_MS", raising=False)
        settings = get_settings()
        assert settings.poll_period_ms == 1000
        assert settings.namespace == "jx"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDSYNC_NAMESPACE", "ci")
        monkeypatch.setenv("BUILDSYNC_POLL_PERIOD_MS", "250")
        settings = get_settings()
        assert settings.namespace == "ci"
        assert settings.poll_period_ms == 250

    def test_toml_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDSYNC_HOME", str(tmp_path / "home"))
        monkeypatch.delenv("BUILDSYNC_NAMESPACE", raising=False)
        monkeypatch.delenv("BUILDSYNC_POLL_PERIOD_MS", raising=False)
        (tmp_path / "buildsync.toml").write_text('namespace = "builds"\npoll_period_ms = 5000\nunknown = 1\n')
        settings = get_settings()
        assert settings.namespace == "builds"
        assert settings.poll_period_ms == 5000

    def test_toml_values_validated(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDSYNC_HOME", str(tmp_path / "home"))
        monkeypatch.delenv("BUILDSYNC_POLL_PERIOD_MS", raising=False)
        (tmp_path / "buildsync.toml").write_text('poll_period_ms = "500"\nkube_verify_ssl = "false"\n')
        settings = get_settings()
        assert settings.poll_period_ms == 500
        assert settings.kube_verify_ssl is False

    def test_env_beats_toml(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDSYNC_HOME", str(tmp_path / "home"))
        monkeypatch.setenv("BUILDSYNC_NAMESPACE", "from-env")
        (tmp_path / "buildsync.toml").write_text('namespace = "from-file"\n')
        assert get_settings().namespace == "from-env"

    def test_broken_toml_ignored(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDSYNC_HOME", str(tmp_path / "home"))
        monkeypatch.delenv("BUILDSYNC_NAMESPACE", raising=False)
        (tmp_path / "buildsync.toml").write_text("namespace = [unclosed\n")
        assert get_settings().namespace == "jx"

    def test_kube_token_file(self, tmp_path):
        token = tmp_path / "token"
        token.write_text("abc123\n")
        settings = BuildSyncSettings(kube_token_file=str(token))
        assert settings.resolve_kube_token() == "abc123"

    def test_explicit_kube_token_wins(self, tmp_path):
        settings = BuildSyncSettings(BUILDSYNC_KUBE_TOKEN="explicit", kube_token_file=str(tmp_path / "missing"))
        assert settings.resolve_kube_token() == "explicit"

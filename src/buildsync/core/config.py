"""buildsync configuration — reads from buildsync.toml, env vars, and CLI args."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Dict, Any
from pydantic_settings import BaseSettings
from pydantic import Field

logger = logging.getLogger("buildsync.config")

SERVICE_ACCOUNT_TOKEN = "/var/run/secrets/kubernetes.io/serviceaccount/token"


class BuildSyncSettings(BaseSettings):
    """Daemon settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8410
    log_level: str = "info"

    # Auth for the event endpoints
    api_key: str = Field(default="buildsync_dev_key", alias="BUILDSYNC_API_KEY")

    # Polling
    poll_period_ms: int = 1000
    namespace: str = Field(default="jx", alias="BUILDSYNC_NAMESPACE")

    # Cluster API server
    kube_api_url: str = Field(default="https://kubernetes.default.svc", alias="BUILDSYNC_KUBE_API_URL")
    kube_token: str | None = Field(default=None, alias="BUILDSYNC_KUBE_TOKEN")
    kube_token_file: str = SERVICE_ACCOUNT_TOKEN
    kube_ca_file: str | None = None
    kube_verify_ssl: bool = True
    request_timeout: float = 10.0

    # Build engine
    jenkins_url: str = Field(default="http://localhost:8080", alias="BUILDSYNC_JENKINS_URL")
    jenkins_user: str | None = None
    jenkins_token: str | None = None

    model_config = {"env_prefix": "BUILDSYNC_", "env_file": ".env", "populate_by_name": True}

    def resolve_kube_token(self) -> str | None:
        """Explicit token first, then the mounted service account token."""
        if self.kube_token:
            return self.kube_token
        token_path = Path(self.kube_token_file)
        if token_path.exists():
            return token_path.read_text().strip()
        return None


class ClientSettings(BaseSettings):
    """CLI client settings."""

    host: str = Field(default="http://localhost:8410", alias="BUILDSYNC_HOST")
    api_key: str = Field(default="buildsync_dev_key", alias="BUILDSYNC_API_KEY")

    model_config = {"env_prefix": "BUILDSYNC_"}


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring config file {path}: {e}")
        return {}


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from buildsync.toml files.

    Searches for buildsync.toml in:
    1. BUILDSYNC_HOME (~/.buildsync/buildsync.toml by default)
    2. Current directory (./buildsync.toml)

    Returns:
        Combined configuration dict from found files, local values winning
    """
    config: Dict[str, Any] = {}

    home = Path(os.environ.get("BUILDSYNC_HOME", "~/.buildsync")).expanduser()
    global_config_path = home / "buildsync.toml"
    if global_config_path.exists():
        config.update(_read_toml(global_config_path))

    local_config_path = Path("buildsync.toml")
    if local_config_path.exists():
        config.update(_read_toml(local_config_path))

    return config


def get_settings() -> BuildSyncSettings:
    toml_config = _load_toml_config()
    known = {k: v for k, v in toml_config.items() if k in BuildSyncSettings.model_fields}

    # Environment variables take precedence over the toml file
    overrides = {}
    for key, value in known.items():
        field = BuildSyncSettings.model_fields[key]
        env_name = field.alias or f"BUILDSYNC_{key.upper()}"
        if env_name not in os.environ:
            overrides[key] = value

    return BuildSyncSettings(**overrides)


def get_client_settings() -> ClientSettings:
    return ClientSettings()

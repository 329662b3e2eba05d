"""Formatting helpers shared by the reconciler and the clients."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

import yaml

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(millis: int) -> str:
    """Format epoch milliseconds as an RFC 3339 UTC timestamp."""
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime(TIMESTAMP_FORMAT)


def join_paths(*parts: str | None) -> str:
    """Join URL path segments with ``/``, skipping ``None`` and avoiding ``//``.

    >>> join_paths("http://jenkins/", "/job/foo/", "42/")
    'http://jenkins/job/foo/42/'
    """
    joined = "/".join(p for p in parts if p is not None)
    joined = re.sub(r"/+", "/", joined)
    joined = joined.replace("/?", "?").replace("/#", "#")
    return joined.replace(":/", "://")


def to_yaml(data: Any) -> str:
    """Canonical YAML rendering, keys sorted."""
    return yaml.safe_dump(data, sort_keys=True, default_flow_style=False)

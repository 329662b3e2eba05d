"""Resource name derivation for PipelineActivity records."""

from __future__ import annotations

import hashlib
import re

# DNS-1123 subdomain, the limit for custom resource names
MAX_NAME_LENGTH = 253

_INVALID_CHARS = re.compile(r"[^a-z0-9.\-]")
_INVALID_CHARS_NO_DOTS = re.compile(r"[^a-z0-9\-]")
_DASH_RUNS = re.compile(r"-{2,}")


def convert_to_kubernetes_name(text: str, allow_dots: bool = False) -> str:
    """Sanitize arbitrary text into a valid Kubernetes resource name.

    Lower-cases, replaces every character outside ``[a-z0-9-]`` (plus ``.``
    when ``allow_dots``) with ``-``, collapses dash runs and trims separators
    from both ends. Names over the length limit are cut and suffixed with a
    short digest of the original text so distinct inputs stay distinct.
    """
    pattern = _INVALID_CHARS if allow_dots else _INVALID_CHARS_NO_DOTS
    name = pattern.sub("-", text.lower())
    name = _DASH_RUNS.sub("-", name).strip("-.")
    if not name:
        raise ValueError(f"Cannot derive a resource name from {text!r}")

    if len(name) > MAX_NAME_LENGTH:
        digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:8]
        name = name[: MAX_NAME_LENGTH - len(digest) - 1].rstrip("-.") + "-" + digest
    return name


def activity_name(pipeline: str, build: int | str) -> str:
    """Name of the PipelineActivity for one build of a pipeline."""
    return convert_to_kubernetes_name(f"{pipeline}-{build}", allow_dots=False)

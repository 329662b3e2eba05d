"""Cluster API access for PipelineActivity resources."""

from buildsync.kube.client import (
    ActivityStore,
    ConflictError,
    KubernetesActivityClient,
    KubernetesClientError,
    UnprocessableEntityError,
)

__all__ = [
    "ActivityStore",
    "ConflictError",
    "KubernetesActivityClient",
    "KubernetesClientError",
    "UnprocessableEntityError",
]

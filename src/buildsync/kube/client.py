"""PipelineActivity store — the cluster API boundary."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from buildsync.models.activity import API_VERSION, PLURAL, PipelineActivity

logger = logging.getLogger("buildsync.kube")


class KubernetesClientError(Exception):
    """Non-success response from the API server."""

    def __init__(self, code: int, message: str, reason: str | None = None):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.reason = reason


class ConflictError(KubernetesClientError):
    """409: the resource already exists or changed underneath us."""


class UnprocessableEntityError(KubernetesClientError):
    """422: the API server rejected the resource as invalid."""


def error_from_response(resp: httpx.Response) -> KubernetesClientError:
    """Build the matching error from a Kubernetes ``Status`` response."""
    message = resp.text
    reason = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or message
        reason = body.get("reason")

    if resp.status_code == 409:
        return ConflictError(resp.status_code, message, reason)
    if resp.status_code == 422:
        return UnprocessableEntityError(resp.status_code, message, reason)
    return KubernetesClientError(resp.status_code, message, reason)


class ActivityStore(ABC):
    """Where PipelineActivity records live."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> PipelineActivity | None:
        """Fetch a record by name; ``None`` if it does not exist."""
        ...

    @abstractmethod
    def create_or_replace(self, namespace: str, activity: PipelineActivity) -> PipelineActivity:
        """Upsert a record by name and return what the store holds afterwards."""
        ...


class KubernetesActivityClient(ActivityStore):
    """PipelineActivity CRUD against a Kubernetes API server.

    Usage:
        with KubernetesActivityClient("https://kubernetes.default.svc", token=token) as client:
            activity = client.get("jx", "org-repo-main-42")
    """

    def __init__(
        self,
        api_url: str,
        token: str | None = None,
        ca_file: str | None = None,
        verify_ssl: bool = True,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        verify: str | bool = verify_ssl
        if verify_ssl and ca_file:
            verify = ca_file

        self._client = httpx.Client(
            base_url=self.api_url,
            headers=headers,
            verify=verify,
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
    def collection_path(namespace: str) -> str:
        return f"/apis/{API_VERSION}/namespaces/{namespace}/{PLURAL}"

    def resource_path(self, namespace: str, name: str) -> str:
        return f"{self.collection_path(namespace)}/{name}"

    def get(self, namespace: str, name: str) -> PipelineActivity | None:
        resp = self._client.get(self.resource_path(namespace, name))
        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise error_from_response(resp)
        return PipelineActivity.from_resource(resp.json())

    def create(self, namespace: str, activity: PipelineActivity) -> PipelineActivity:
        resp = self._client.post(self.collection_path(namespace), json=activity.to_resource())
        if resp.is_error:
            raise error_from_response(resp)
        return PipelineActivity.from_resource(resp.json())

    def replace(self, namespace: str, activity: PipelineActivity) -> PipelineActivity:
        resp = self._client.put(self.resource_path(namespace, activity.name), json=activity.to_resource())
        if resp.is_error:
            raise error_from_response(resp)
        return PipelineActivity.from_resource(resp.json())

    def create_or_replace(self, namespace: str, activity: PipelineActivity) -> PipelineActivity:
        try:
            return self.create(namespace, activity)
        except ConflictError:
            logger.debug(f"PipelineActivity {activity.name} exists, replacing")

        current = self.get(namespace, activity.name)
        if current is not None:
            activity.metadata.resource_version = current.metadata.resource_version
        return self.replace(namespace, activity)

"""Access to declared records and Secrets on the Kubernetes API server."""

from __future__ import annotations

import time
from typing import Any, Callable

from kubernetes import client

from ... import metrics
from ...constants import API_GROUP, API_VERSION, FIELD_MANAGER
from ...models import ObjectKey


def is_not_found(error: BaseException) -> bool:
    """Check whether an exception is a Kubernetes 404."""
    return isinstance(error, client.exceptions.ApiException) and error.status == 404


class RecordStore:
    """Get/update custom resources and Secrets.

    ``update`` sends the full object including ``metadata.resourceVersion``,
    so a concurrent writer makes it fail with 409. Conflicts are not handled
    here; the caller re-fetches on its next attempt.
    """

    def __init__(
        self,
        custom_api: client.CustomObjectsApi | None = None,
        core_api: client.CoreV1Api | None = None,
        request_timeout: float = 30.0,
    ) -> None:
        self.custom_api = custom_api or client.CustomObjectsApi()
        self.core_api = core_api or client.CoreV1Api()
        self.request_timeout = request_timeout

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = fn(_request_timeout=self.request_timeout, **kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except Exception:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get(self, plural: str, key: ObjectKey) -> dict[str, Any]:
        """Read a custom resource.

        Raises:
            client.exceptions.ApiException: 404 if the record does not exist
        """
        return self._call(
            f"get_{plural}",
            self.custom_api.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=key.namespace,
            plural=plural,
            name=key.name,
        )

    def update(self, plural: str, body: dict[str, Any]) -> dict[str, Any]:
        """Replace a custom resource (metadata and spec), returning the stored object."""
        meta = body.get("metadata", {})
        return self._call(
            f"update_{plural}",
            self.custom_api.replace_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=meta.get("namespace", "default"),
            plural=plural,
            name=meta.get("name"),
            body=body,
        )

    def update_status(self, plural: str, body: dict[str, Any]) -> dict[str, Any]:
        """Persist the status subresource of a custom resource."""
        meta = body.get("metadata", {})
        return self._call(
            f"update_{plural}_status",
            self.custom_api.patch_namespaced_custom_object_status,
            group=API_GROUP,
            version=API_VERSION,
            namespace=meta.get("namespace", "default"),
            plural=plural,
            name=meta.get("name"),
            body={"status": body.get("status", {})},
        )

    def get_secret(self, key: ObjectKey) -> client.V1Secret | None:
        """Read a Secret, returning None if it does not exist."""
        try:
            return self._call(
                "get_secret",
                self.core_api.read_namespaced_secret,
                name=key.name,
                namespace=key.namespace,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return None
            raise

    def create_secret(self, namespace: str, body: dict[str, Any]) -> None:
        self._call(
            "create_secret",
            self.core_api.create_namespaced_secret,
            namespace=namespace,
            body=body,
            field_manager=FIELD_MANAGER,
        )

    def replace_secret(self, secret: client.V1Secret) -> None:
        self._call(
            "replace_secret",
            self.core_api.replace_namespaced_secret,
            name=secret.metadata.name,
            namespace=secret.metadata.namespace,
            body=secret,
            field_manager=FIELD_MANAGER,
        )


def get_record_store(request_timeout: float = 30.0) -> RecordStore:
    """Load cluster credentials and build a RecordStore."""
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return RecordStore(request_timeout=request_timeout)

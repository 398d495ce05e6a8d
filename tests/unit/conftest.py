"""Shared fixtures: in-memory record store and storage service."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import patch

import pytest
from kubernetes import client

from minio_ext_operator.constants import (
    ERR_NO_SUCH_BUCKET,
    ERR_NO_SUCH_POLICY,
    ERR_NO_SUCH_USER,
)
from minio_ext_operator.models import ObjectKey
from minio_ext_operator.utils.errors import StorageServiceError


class FakeRecordStore:
    """RecordStore double keeping objects in memory with resourceVersion checks."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.secrets: dict[tuple[str, str], client.V1Secret] = {}
        self.calls: list[tuple[str, ...]] = []
        self._version = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def add(self, plural: str, body: dict[str, Any]) -> dict[str, Any]:
        body = copy.deepcopy(body)
        meta = body.setdefault("metadata", {})
        meta.setdefault("namespace", "default")
        meta.setdefault("uid", f"uid-{meta['name']}")
        meta["resourceVersion"] = self._next_version()
        self.objects[(plural, meta["namespace"], meta["name"])] = body
        return copy.deepcopy(body)

    def stored(self, plural: str, namespace: str, name: str) -> dict[str, Any] | None:
        return self.objects.get((plural, namespace, name))

    def mark_deleted(self, plural: str, namespace: str, name: str) -> None:
        self.objects[(plural, namespace, name)]["metadata"]["deletionTimestamp"] = "2024-01-01T00:00:00Z"

    def get(self, plural: str, key: ObjectKey) -> dict[str, Any]:
        self.calls.append(("get", plural, key.name))
        body = self.objects.get((plural, key.namespace, key.name))
        if body is None:
            raise client.exceptions.ApiException(status=404, reason="Not Found")
        return copy.deepcopy(body)

    def update(self, plural: str, body: dict[str, Any]) -> dict[str, Any]:
        meta = body["metadata"]
        self.calls.append(("update", plural, meta["name"]))
        key = (plural, meta["namespace"], meta["name"])
        current = self.objects.get(key)
        if current is None:
            raise client.exceptions.ApiException(status=404, reason="Not Found")
        if current["metadata"]["resourceVersion"] != meta.get("resourceVersion"):
            raise client.exceptions.ApiException(status=409, reason="Conflict")

        updated = copy.deepcopy(current)
        updated["metadata"]["finalizers"] = list(meta.get("finalizers") or [])
        updated["spec"] = copy.deepcopy(body.get("spec"))
        # The API server drops an object marked for deletion once it has no finalizers
        if updated["metadata"].get("deletionTimestamp") and not updated["metadata"]["finalizers"]:
            del self.objects[key]
            return copy.deepcopy(updated)
        updated["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = updated
        return copy.deepcopy(updated)

    def update_status(self, plural: str, body: dict[str, Any]) -> dict[str, Any]:
        meta = body["metadata"]
        self.calls.append(("update_status", plural, meta["name"]))
        key = (plural, meta["namespace"], meta["name"])
        current = self.objects.get(key)
        if current is None:
            raise client.exceptions.ApiException(status=404, reason="Not Found")
        current["status"] = copy.deepcopy(body.get("status", {}))
        current["metadata"]["resourceVersion"] = self._next_version()
        return copy.deepcopy(current)

    def get_secret(self, key: ObjectKey) -> client.V1Secret | None:
        self.calls.append(("get_secret", key.name))
        secret = self.secrets.get((key.namespace, key.name))
        return copy.deepcopy(secret)

    def create_secret(self, namespace: str, body: dict[str, Any]) -> None:
        name = body["metadata"]["name"]
        self.calls.append(("create_secret", name))
        if (namespace, name) in self.secrets:
            raise client.exceptions.ApiException(status=409, reason="AlreadyExists")
        self.secrets[(namespace, name)] = client.V1Secret(
            metadata=client.V1ObjectMeta(
                name=name,
                namespace=namespace,
                labels=body["metadata"].get("labels"),
                owner_references=body["metadata"].get("ownerReferences"),
            ),
            data=dict(body.get("data") or {}),
            type=body.get("type"),
        )

    def replace_secret(self, secret: client.V1Secret) -> None:
        self.calls.append(("replace_secret", secret.metadata.name))
        self.secrets[(secret.metadata.namespace, secret.metadata.name)] = copy.deepcopy(secret)


class FakeStorage:
    """StorageAdmin double behaving like a MinIO server."""

    def __init__(self) -> None:
        self.buckets: set[str] = set()
        self.bucket_policies: dict[str, str] = {}
        self.policies: dict[str, str] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.user_policies: dict[str, str] = {}
        self.calls: list[tuple[Any, ...]] = []

    def bucket_exists(self, name: str) -> bool:
        self.calls.append(("bucket_exists", name))
        return name in self.buckets

    def make_bucket(self, name: str) -> None:
        self.calls.append(("make_bucket", name))
        self.buckets.add(name)

    def remove_bucket(self, name: str, force: bool = False) -> None:
        self.calls.append(("remove_bucket", name, force))
        if name not in self.buckets:
            raise StorageServiceError(ERR_NO_SUCH_BUCKET, "The specified bucket does not exist", "delete_bucket")
        self.buckets.discard(name)
        self.bucket_policies.pop(name, None)

    def set_bucket_policy(self, name: str, policy: str) -> None:
        self.calls.append(("set_bucket_policy", name))
        if name not in self.buckets:
            raise StorageServiceError(ERR_NO_SUCH_BUCKET, "The specified bucket does not exist", "put_bucket_policy")
        self.bucket_policies[name] = policy

    def add_canned_policy(self, name: str, policy: str) -> None:
        self.calls.append(("add_canned_policy", name))
        self.policies[name] = policy

    def remove_canned_policy(self, name: str) -> None:
        self.calls.append(("remove_canned_policy", name))
        if name not in self.policies:
            raise StorageServiceError(ERR_NO_SUCH_POLICY, "The canned policy does not exist", "policy_remove")
        del self.policies[name]

    def set_user_policy(self, policy_name: str, user: str) -> None:
        self.calls.append(("set_user_policy", policy_name, user))
        if user not in self.users:
            raise StorageServiceError(ERR_NO_SUCH_USER, "The specified user does not exist", "policy_set")
        self.user_policies[user] = policy_name

    def add_user(self, access_key: str, secret_key: str) -> None:
        self.calls.append(("add_user", access_key))
        self.users[access_key] = {"secretKey": secret_key, "status": "disabled"}

    def enable_user(self, access_key: str) -> None:
        self.calls.append(("enable_user", access_key))
        if access_key not in self.users:
            raise StorageServiceError(ERR_NO_SUCH_USER, "The specified user does not exist", "user_enable")
        self.users[access_key]["status"] = "enabled"

    def remove_user(self, access_key: str) -> None:
        self.calls.append(("remove_user", access_key))
        if access_key not in self.users:
            raise StorageServiceError(ERR_NO_SUCH_USER, "The specified user does not exist", "user_remove")
        del self.users[access_key]
        self.user_policies.pop(access_key, None)

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


class CountingRandomSource:
    """Deterministic random source producing distinct byte strings."""

    def __init__(self) -> None:
        self.calls = 0

    def token_bytes(self, nbytes: int) -> bytes:
        self.calls += 1
        return bytes((self.calls + i) % 256 for i in range(nbytes))


@pytest.fixture(autouse=True)
def mock_kopf_event():
    """Kubernetes events need a running operator; record them instead."""
    with patch("minio_ext_operator.utils.events.kopf.event") as mock_event:
        yield mock_event


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def random_source() -> CountingRandomSource:
    return CountingRandomSource()


def make_body(kind: str, name: str, spec: dict[str, Any] | None = None, namespace: str = "default") -> dict[str, Any]:
    body: dict[str, Any] = {
        "apiVersion": "minio.k8s.reddec.net/v1alpha1",
        "kind": kind,
        "metadata": {"name": name, "namespace": namespace, "generation": 1},
    }
    if spec is not None:
        body["spec"] = spec
    return body

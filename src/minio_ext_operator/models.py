"""Typed views over the Bucket, Policy and User custom resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from .constants import SECRET_SUFFIX


class ObjectKey(NamedTuple):
    """Namespace/name pair identifying a namespaced resource."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class BucketCondition(str, Enum):
    """Condition types reported on Bucket resources."""

    CREATED = "bucketCreated"
    POLICY_ASSIGNED = "bucketPolicyAssigned"


class PolicyCondition(str, Enum):
    """Condition types reported on Policy resources."""

    CREATED = "policyCreated"
    POLICY_ASSIGNED = "policyAssigned"


class UserCondition(str, Enum):
    """Condition types reported on User resources."""

    CREATED = "userCreated"
    SECRET_CREATED = "userSecretCreated"


@dataclass
class BucketAccess:
    """Permissions of one user on a bucket. read+write means full access."""

    user: str
    read: bool = False
    write: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BucketAccess:
        return cls(
            user=data.get("user", ""),
            read=bool(data.get("read", False)),
            write=bool(data.get("write", False)),
        )


@dataclass
class BucketSpec:
    public: bool = False
    retain: bool = False
    access: list[BucketAccess] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BucketSpec:
        return cls(
            public=bool(data.get("public", False)),
            retain=bool(data.get("retain", False)),
            access=[BucketAccess.from_dict(item) for item in data.get("access") or []],
        )


@dataclass
class PolicySpec:
    user: str = ""
    read: bool = False
    write: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PolicySpec:
        return cls(
            user=data.get("user", ""),
            read=bool(data.get("read", False)),
            write=bool(data.get("write", False)),
        )


@dataclass
class Resource:
    """Common envelope of a declared record.

    The raw Kubernetes object is kept in ``body`` and is what gets written
    back to the API server; the typed attributes are read-only views of it.
    """

    body: dict[str, Any]

    @property
    def metadata(self) -> dict[str, Any]:
        return self.body.setdefault("metadata", {})

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace", "default")

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.namespace, self.name)

    @property
    def uid(self) -> str:
        return self.metadata.get("uid", "")

    @property
    def deletion_timestamp(self) -> str | None:
        return self.metadata.get("deletionTimestamp")

    @property
    def finalizers(self) -> list[str]:
        return list(self.metadata.get("finalizers") or [])

    @property
    def conditions(self) -> list[dict[str, Any]]:
        status = self.body.setdefault("status", {})
        return status.setdefault("conditions", [])

    def has_finalizer(self, finalizer: str) -> bool:
        return finalizer in self.finalizers

    def add_finalizer(self, finalizer: str) -> bool:
        """Add a finalizer. Returns True if the object changed."""
        finalizers = self.finalizers
        if finalizer in finalizers:
            return False
        finalizers.append(finalizer)
        self.metadata["finalizers"] = finalizers
        return True

    def remove_finalizer(self, finalizer: str) -> bool:
        """Remove a finalizer. Returns True if the object changed."""
        finalizers = self.finalizers
        if finalizer not in finalizers:
            return False
        finalizers.remove(finalizer)
        self.metadata["finalizers"] = finalizers
        return True


@dataclass
class Bucket(Resource):
    @property
    def spec(self) -> BucketSpec:
        return BucketSpec.from_dict(self.body.get("spec") or {})


@dataclass
class Policy(Resource):
    @property
    def spec(self) -> PolicySpec:
        return PolicySpec.from_dict(self.body.get("spec") or {})


@dataclass
class User(Resource):
    """Identity only: credential material lives in the companion Secret."""

    @property
    def secret_name(self) -> str:
        return f"{self.name}{SECRET_SUFFIX}"


@dataclass
class Credentials:
    """Access/secret key pair stored in a User's companion Secret."""

    access_key: str
    secret_key: str
    generated: bool = False

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key!r}, secret_key='***', generated={self.generated})"

"""Builder for bucket and IAM policy documents."""

from __future__ import annotations

import json
from typing import Any, NamedTuple

from ..constants import (
    ACTION_ALL,
    ACTION_GET_OBJECT,
    ACTION_PUT_OBJECT,
    BUCKET_ARN_PREFIX,
    POLICY_VERSION,
    READ_ACTIONS,
    WILDCARD_PRINCIPAL,
)
from ..models import BucketSpec, PolicySpec


class AccessRule(NamedTuple):
    """One Allow statement: who may do what on which resource."""

    principal: str
    actions: tuple[str, ...]
    resource: str


def objects_resource(bucket_name: str) -> str:
    """ARN pattern matching every object of a bucket."""
    return f"{BUCKET_ARN_PREFIX}{bucket_name}/*"


def actions_for(read: bool, write: bool) -> tuple[str, ...]:
    """Map read/write flags to an action set.

    read+write is full access, neither flag gives an empty set.
    """
    if read and write:
        return (ACTION_ALL,)
    if read:
        return READ_ACTIONS
    if write:
        return (ACTION_PUT_OBJECT,)
    return ()


def bucket_access_rules(bucket_name: str, spec: BucketSpec) -> list[AccessRule]:
    """Access rules for a Bucket: anonymous read first (if public), then one per entry."""
    resource = objects_resource(bucket_name)
    rules = []
    if spec.public:
        rules.append(AccessRule(WILDCARD_PRINCIPAL, (ACTION_GET_OBJECT,), resource))
    for access in spec.access:
        rules.append(AccessRule(access.user, actions_for(access.read, access.write), resource))
    return rules


def policy_access_rules(policy_name: str, spec: PolicySpec) -> list[AccessRule]:
    """Access rules for a Policy: a single statement for its user.

    The policy is scoped to the bucket named like the Policy resource.
    """
    return [AccessRule(spec.user, actions_for(spec.read, spec.write), objects_resource(policy_name))]


def build_policy_document(rules: list[AccessRule]) -> dict[str, Any]:
    """Build a policy document, keeping the rules in the given order."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"AWS": [rule.principal]},
                "Action": list(rule.actions),
                "Resource": [rule.resource],
            }
            for rule in rules
        ],
    }


def render_policy(document: dict[str, Any]) -> str:
    """Serialize a policy document. Equal documents give identical text."""
    return json.dumps(document, separators=(",", ":"))


def bucket_policy(bucket_name: str, spec: BucketSpec) -> str:
    return render_policy(build_policy_document(bucket_access_rules(bucket_name, spec)))


def iam_policy(policy_name: str, spec: PolicySpec) -> str:
    return render_policy(build_policy_document(policy_access_rules(policy_name, spec)))

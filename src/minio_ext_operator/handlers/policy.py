"""Handler for Policy CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.policy import iam_policy
from ..constants import (
    API_GROUP_VERSION,
    DEFAULT_REQUEUE_INTERVAL,
    ERR_NO_SUCH_POLICY,
    ERR_NO_SUCH_USER,
    FINALIZER_POLICY,
    KIND_POLICY,
    PLURAL_POLICIES,
    USER_NOT_FOUND_RETRY_INTERVAL,
)
from ..models import Policy, PolicyCondition
from ..services.kubernetes import RecordStore
from ..services.minio import StorageAdmin
from ..utils.errors import ReconcileError, has_error_code
from ..utils.events import emit_policy_applied, emit_policy_attached, emit_policy_deleted
from .base import BaseHandler, ReconcileResult
from .shared import get_config, get_storage, get_store, run_reconcile


class PolicyHandler(BaseHandler[Policy]):
    """Handler for Policy resources.

    A Policy is a canned policy on the storage service named after the
    resource, attached to ``spec.user``. The user may be declared after
    the policy; attaching then retries on a short interval.
    """

    kind = KIND_POLICY
    plural = PLURAL_POLICIES
    finalizer = FINALIZER_POLICY
    record_type = Policy

    def __init__(
        self,
        store: RecordStore,
        storage: StorageAdmin,
        requeue_interval: float = DEFAULT_REQUEUE_INTERVAL,
        user_not_found_retry: float = USER_NOT_FOUND_RETRY_INTERVAL,
    ) -> None:
        super().__init__(store, storage, requeue_interval)
        self.user_not_found_retry = user_not_found_retry

    def teardown(self, policy: Policy) -> None:
        try:
            with self.step("remove-policy"):
                self.storage.remove_canned_policy(policy.name)
        except ReconcileError as e:
            if not has_error_code(e, ERR_NO_SUCH_POLICY):
                raise
            self.log_info(policy, f"Policy {policy.name} already removed", event="deletion", reason="NotFound")
            return

        self.log_info(policy, f"Policy {policy.name} removed", event="deletion", reason="Deleted")
        emit_policy_deleted(policy.body, policy.name)

    def converge(self, policy: Policy) -> ReconcileResult:
        spec = policy.spec

        document = iam_policy(policy.name, spec)
        with self.step("add-policy"):
            self.storage.add_canned_policy(policy.name, document)
        if self.mark(policy, PolicyCondition.CREATED, "PolicyCreated", f"Policy {policy.name} applied"):
            emit_policy_applied(policy.body, policy.name)

        try:
            with self.step("attach-policy"):
                self.storage.set_user_policy(policy.name, spec.user)
        except ReconcileError as e:
            if not has_error_code(e, ERR_NO_SUCH_USER):
                raise
            self.log_warning(
                policy,
                f"User {spec.user} does not exist yet, retrying in {self.user_not_found_retry}s",
                reason="UserNotFound",
            )
            self.mark(
                policy,
                PolicyCondition.POLICY_ASSIGNED,
                "UserNotFound",
                f"User {spec.user} not found",
                satisfied=False,
            )
            return ReconcileResult(self.user_not_found_retry)

        if self.mark(policy, PolicyCondition.POLICY_ASSIGNED, "PolicyAssigned", f"Policy attached to {spec.user}"):
            emit_policy_attached(policy.body, policy.name, spec.user)

        return self.requeue(policy)


def get_handler() -> PolicyHandler:
    config = get_config()
    return PolicyHandler(get_store(), get_storage(), config.requeue_interval, config.user_not_found_retry)


@kopf.on.create(API_GROUP_VERSION, KIND_POLICY)
@kopf.on.update(API_GROUP_VERSION, KIND_POLICY)
@kopf.on.resume(API_GROUP_VERSION, KIND_POLICY)
@kopf.timer(API_GROUP_VERSION, KIND_POLICY, interval=get_config().requeue_interval)
def handle_policy(
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Handle Policy resource reconciliation."""
    run_reconcile(get_handler(), namespace, name)


@kopf.on.delete(API_GROUP_VERSION, KIND_POLICY, optional=True)
def handle_policy_delete(
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Handle Policy resource deletion."""
    run_reconcile(get_handler(), namespace, name)

"""Handler for Bucket CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.policy import bucket_policy
from ..constants import (
    API_GROUP_VERSION,
    ERR_NO_SUCH_BUCKET,
    FINALIZER_BUCKET,
    KIND_BUCKET,
    PLURAL_BUCKETS,
)
from ..models import Bucket, BucketCondition
from ..utils.errors import ReconcileError, has_error_code
from ..utils.events import emit_bucket_created, emit_bucket_deleted
from .base import BaseHandler, ReconcileResult
from .shared import get_config, get_storage, get_store, run_reconcile


class BucketHandler(BaseHandler[Bucket]):
    """Handler for Bucket resources.

    The bucket is named after the resource. Its policy is rebuilt from the
    spec and pushed on every pass, so access edits converge without a
    separate change detection.
    """

    kind = KIND_BUCKET
    plural = PLURAL_BUCKETS
    finalizer = FINALIZER_BUCKET
    record_type = Bucket
    missing_is_done = False

    def teardown(self, bucket: Bucket) -> None:
        if bucket.spec.retain:
            self.log_info(bucket, f"Bucket {bucket.name} is retained, leaving it in place", event="deletion", reason="Retained")
            return

        try:
            with self.step("remove-bucket"):
                self.storage.remove_bucket(bucket.name, force=True)
        except ReconcileError as e:
            if not has_error_code(e, ERR_NO_SUCH_BUCKET):
                raise
            self.log_info(bucket, f"Bucket {bucket.name} already removed", event="deletion", reason="NotFound")
            return

        self.log_info(bucket, f"Bucket {bucket.name} removed", event="deletion", reason="Deleted")
        emit_bucket_deleted(bucket.body, bucket.name)

    def converge(self, bucket: Bucket) -> ReconcileResult:
        with self.step("check-bucket"):
            exists = self.storage.bucket_exists(bucket.name)

        if not exists:
            with self.step("create-bucket"):
                self.storage.make_bucket(bucket.name)
            self.log_info(bucket, f"Bucket {bucket.name} created", event="create", reason="Created")
            emit_bucket_created(bucket.body, bucket.name)

        self.mark(bucket, BucketCondition.CREATED, "BucketCreated", f"Bucket {bucket.name} exists")

        policy = bucket_policy(bucket.name, bucket.spec)
        with self.step("set-bucket-policy"):
            self.storage.set_bucket_policy(bucket.name, policy)
        self.mark(bucket, BucketCondition.POLICY_ASSIGNED, "PolicyAssigned", "Bucket policy applied")

        return self.requeue(bucket)


def get_handler() -> BucketHandler:
    return BucketHandler(get_store(), get_storage(), get_config().requeue_interval)


@kopf.on.create(API_GROUP_VERSION, KIND_BUCKET)
@kopf.on.update(API_GROUP_VERSION, KIND_BUCKET)
@kopf.on.resume(API_GROUP_VERSION, KIND_BUCKET)
@kopf.timer(API_GROUP_VERSION, KIND_BUCKET, interval=get_config().requeue_interval)
def handle_bucket(
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Handle Bucket resource reconciliation."""
    run_reconcile(get_handler(), namespace, name)


@kopf.on.delete(API_GROUP_VERSION, KIND_BUCKET, optional=True)
def handle_bucket_delete(
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Handle Bucket resource deletion."""
    run_reconcile(get_handler(), namespace, name)

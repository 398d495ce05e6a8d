"""Shared utilities for handlers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import kopf

from ..config import OperatorConfig
from ..models import ObjectKey
from ..services.kubernetes import RecordStore, get_record_store
from ..services.minio import MinioStorageAdmin
from ..utils.errors import CredentialSourceError
from ..utils.secrets import SecretRecordManager


@lru_cache(maxsize=1)
def get_config() -> OperatorConfig:
    """Get the operator configuration, read once from the environment."""
    return OperatorConfig.from_env()


@lru_cache(maxsize=1)
def get_store() -> RecordStore:
    """Get the Kubernetes record store."""
    return get_record_store(request_timeout=get_config().request_timeout)


@lru_cache(maxsize=1)
def get_storage() -> MinioStorageAdmin:
    """Get the MinIO admin client.

    Returns:
        MinioStorageAdmin built from the operator configuration
    """
    config = get_config()
    return MinioStorageAdmin(
        endpoint=config.minio_endpoint,
        access_key=config.minio_access_key,
        secret_key=config.minio_secret_key,
        region=config.minio_region,
        insecure_skip_verify=config.insecure_skip_verify,
        request_timeout=config.request_timeout,
    )


@lru_cache(maxsize=1)
def get_secret_manager() -> SecretRecordManager:
    return SecretRecordManager(get_store(), credential_bytes=get_config().credential_bytes)


def run_reconcile(handler: Any, namespace: str, name: str) -> None:
    """Run one reconcile and translate its outcome for kopf.

    A requeue shorter than the regular cadence is requested through
    ``kopf.TemporaryError``; a broken credential source stops retries.
    """
    try:
        result = handler.reconcile_with_metrics(ObjectKey(namespace, name))
    except CredentialSourceError as e:
        raise kopf.PermanentError(f"Cannot generate credentials: {e}") from e

    if result.requeue_after is not None and result.requeue_after < get_config().requeue_interval:
        raise kopf.TemporaryError(
            f"{handler.kind} {namespace}/{name} not converged yet",
            delay=result.requeue_after,
        )

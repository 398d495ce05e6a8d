"""MinIO storage service client.

Bucket operations go through the S3 API (boto3); user and policy
management go through the MinIO admin API (minio.MinioAdmin).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from typing import Any, Callable
from urllib.parse import urlparse

import boto3
import certifi
import urllib3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from minio import MinioAdmin
from minio.credentials import StaticProvider
from minio.error import MinioAdminException

from ... import metrics
from ...constants import ERR_NO_SUCH_BUCKET
from ...utils.errors import StorageServiceError

logger = logging.getLogger(__name__)

FORCE_DELETE_HEADER = "x-minio-force-delete"

_BUCKET_NOT_FOUND_CODES = {"404", "NotFound", ERR_NO_SUCH_BUCKET}


def _add_force_delete_header(request: Any, **kwargs: Any) -> None:
    request.headers[FORCE_DELETE_HEADER] = "true"


def admin_error_code(error: MinioAdminException) -> tuple[str, str]:
    """Extract the machine-readable code and message from an admin API error.

    The admin API answers with a JSON body such as
    ``{"Code": "XMinioAdminNoSuchUser", "Message": "..."}``.
    """
    body = getattr(error, "_body", "") or ""
    status = str(getattr(error, "_code", "") or "")
    try:
        data = json.loads(body)
    except ValueError:
        return status, body or str(error)
    if not isinstance(data, dict):
        return status, body
    return data.get("Code") or status, data.get("Message") or body


class MinioStorageAdmin:
    """StorageAdmin implementation for MinIO."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
        insecure_skip_verify: bool = False,
        request_timeout: float = 30.0,
        s3_client: Any | None = None,
        force_s3_client: Any | None = None,
        admin_client: Any | None = None,
    ) -> None:
        """Initialize the MinIO client.

        Args:
            endpoint: Storage service URL, e.g. ``https://minio.minio:9000``
            access_key: Admin access key
            secret_key: Admin secret key
            region: Region used when creating buckets
            insecure_skip_verify: Skip TLS verification
            request_timeout: Connect/read timeout for every call, in seconds
            s3_client: Pre-built S3 client (tests)
            force_s3_client: Pre-built S3 client sending the force-delete header (tests)
            admin_client: Pre-built admin client (tests)
        """
        self.endpoint = endpoint
        self.region = region

        parsed = urlparse(endpoint if "://" in endpoint else f"http://{endpoint}")
        secure = parsed.scheme == "https"

        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            connect_timeout=request_timeout,
            read_timeout=request_timeout,
            retries={"max_attempts": 1},
        )

        def make_s3_client() -> Any:
            return boto3.client(
                "s3",
                endpoint_url=f"{parsed.scheme}://{parsed.netloc}",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                config=config,
                verify=not insecure_skip_verify,
            )

        self.client = s3_client or make_s3_client()

        # Separate client so the force-delete header never leaks into other calls
        if force_s3_client is None:
            force_s3_client = make_s3_client()
            force_s3_client.meta.events.register("before-sign.s3.DeleteBucket", _add_force_delete_header)
        self.force_client = force_s3_client

        if admin_client is None:
            http_client = urllib3.PoolManager(
                timeout=urllib3.Timeout(connect=request_timeout, read=request_timeout),
                cert_reqs="CERT_NONE" if insecure_skip_verify else "CERT_REQUIRED",
                ca_certs=None if insecure_skip_verify else (os.environ.get("SSL_CERT_FILE") or certifi.where()),
                retries=False,
            )
            admin_client = MinioAdmin(
                parsed.netloc,
                credentials=StaticProvider(access_key, secret_key),
                region=region,
                secure=secure,
                cert_check=not insecure_skip_verify,
                http_client=http_client,
            )
        self.admin = admin_client

    def _s3_call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = fn(**kwargs)
            metrics.storage_operations_total.labels(operation=operation, result="success").inc()
            return result
        except ClientError as e:
            metrics.storage_operations_total.labels(operation=operation, result="error").inc()
            error = e.response.get("Error", {})
            raise StorageServiceError(
                str(error.get("Code", "")),
                error.get("Message") or str(e),
                operation,
            ) from e
        except BotoCoreError as e:
            metrics.storage_operations_total.labels(operation=operation, result="error").inc()
            raise StorageServiceError(type(e).__name__, str(e), operation) from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="s3", operation=operation).observe(duration)

    def _admin_call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = fn(*args, **kwargs)
            metrics.storage_operations_total.labels(operation=operation, result="success").inc()
            return result
        except MinioAdminException as e:
            metrics.storage_operations_total.labels(operation=operation, result="error").inc()
            code, message = admin_error_code(e)
            raise StorageServiceError(code, message, operation) from e
        except urllib3.exceptions.HTTPError as e:
            metrics.storage_operations_total.labels(operation=operation, result="error").inc()
            raise StorageServiceError(type(e).__name__, str(e), operation) from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="admin", operation=operation).observe(duration)

    def bucket_exists(self, name: str) -> bool:
        """Check if bucket exists."""
        try:
            self._s3_call("head_bucket", self.client.head_bucket, Bucket=name)
            return True
        except StorageServiceError as e:
            if e.code in _BUCKET_NOT_FOUND_CODES:
                return False
            raise

    def make_bucket(self, name: str) -> None:
        """Create a bucket."""
        create_params: dict[str, Any] = {"Bucket": name}
        if self.region and self.region != "us-east-1":
            create_params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        self._s3_call("create_bucket", self.client.create_bucket, **create_params)
        logger.info(f"Created bucket {name}")

    def remove_bucket(self, name: str, force: bool = False) -> None:
        """Delete a bucket.

        With ``force`` the server drops the bucket together with its content
        in a single request; no objects are listed or deleted client-side.
        """
        client = self.force_client if force else self.client
        self._s3_call("delete_bucket", client.delete_bucket, Bucket=name)
        logger.info(f"Deleted bucket {name}")

    def set_bucket_policy(self, name: str, policy: str) -> None:
        """Set bucket policy."""
        self._s3_call("put_bucket_policy", self.client.put_bucket_policy, Bucket=name, Policy=policy)

    def add_canned_policy(self, name: str, policy: str) -> None:
        """Create or replace a canned policy."""
        fd, path = tempfile.mkstemp(prefix="policy-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(policy)
            self._admin_call("policy_add", self.admin.policy_add, name, path)
        finally:
            os.unlink(path)

    def remove_canned_policy(self, name: str) -> None:
        self._admin_call("policy_remove", self.admin.policy_remove, name)

    def set_user_policy(self, policy_name: str, user: str) -> None:
        self._admin_call("policy_set", self.admin.policy_set, policy_name, user=user)

    def add_user(self, access_key: str, secret_key: str) -> None:
        self._admin_call("user_add", self.admin.user_add, access_key, secret_key)

    def enable_user(self, access_key: str) -> None:
        self._admin_call("user_enable", self.admin.user_enable, access_key)

    def remove_user(self, access_key: str) -> None:
        self._admin_call("user_remove", self.admin.user_remove, access_key)

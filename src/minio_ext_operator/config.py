"""Runtime configuration for the MinIO Ext Operator."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .constants import (
    CONTROLLER_NAME,
    DEFAULT_CREDENTIAL_BYTES,
    DEFAULT_REQUEUE_INTERVAL,
    USER_NOT_FOUND_RETRY_INTERVAL,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _get_positive(env: Mapping[str, str], name: str, default: float, cast: type = float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return cast(default)
    try:
        value = cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _get_log_level(env: Mapping[str, str], name: str, default: str) -> str:
    level = env.get(name, default).strip().upper() or default
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{name} must be a logging level name, got {level!r}")
    return level


@dataclass(frozen=True)
class OperatorConfig:
    """Operator settings, read once at startup.

    Environment Variables:
        MINIO_ENDPOINT: Storage service URL (default: http://minio:9000)
        MINIO_ACCESS_KEY: Admin access key
        MINIO_SECRET_KEY: Admin secret key
        MINIO_REGION: Region used for bucket creation (default: us-east-1)
        MINIO_INSECURE_SKIP_VERIFY: Skip TLS verification (default: false)
        CREDENTIAL_BYTES: Random bytes per generated secret key (default: 32)
        REQUEUE_INTERVAL_SECONDS: Convergence cadence (default: 60)
        USER_NOT_FOUND_RETRY_SECONDS: Policy attach retry (default: 10)
        REQUEST_TIMEOUT_SECONDS: Timeout for outbound API calls (default: 30)
        METRICS_PORT: Port for /metrics, /healthz and /readyz (default: 8080)
        MAX_WORKERS: Size of the kopf handler thread pool (default: 4)
        WATCH_NAMESPACE: Namespace to watch, empty for cluster-wide (default: empty)
        LOG_LEVEL: Root logging level name (default: INFO)
        OTEL_TRACES_ENABLED: Export OpenTelemetry traces (default: false)
        OTEL_EXPORTER_OTLP_ENDPOINT: OTLP gRPC endpoint (default: http://localhost:4317)
        OTEL_SERVICE_NAME: Service name on exported spans (default: minio-ext-operator)
    """

    minio_endpoint: str = "http://minio:9000"
    minio_access_key: str = ""
    minio_secret_key: str = ""
    minio_region: str = "us-east-1"
    insecure_skip_verify: bool = False
    credential_bytes: int = DEFAULT_CREDENTIAL_BYTES
    requeue_interval: float = DEFAULT_REQUEUE_INTERVAL
    user_not_found_retry: float = USER_NOT_FOUND_RETRY_INTERVAL
    request_timeout: float = 30.0
    metrics_port: int = 8080
    max_workers: int = 4
    watch_namespace: str = ""
    log_level: str = "INFO"
    traces_enabled: bool = False
    otlp_endpoint: str = "http://localhost:4317"
    service_name: str = CONTROLLER_NAME

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> OperatorConfig:
        """Build the configuration from environment variables."""
        if env is None:
            env = os.environ

        return cls(
            minio_endpoint=env.get("MINIO_ENDPOINT", cls.minio_endpoint),
            minio_access_key=env.get("MINIO_ACCESS_KEY", ""),
            minio_secret_key=env.get("MINIO_SECRET_KEY", ""),
            minio_region=env.get("MINIO_REGION", cls.minio_region),
            insecure_skip_verify=_get_bool(env, "MINIO_INSECURE_SKIP_VERIFY", False),
            credential_bytes=int(_get_positive(env, "CREDENTIAL_BYTES", DEFAULT_CREDENTIAL_BYTES, int)),
            requeue_interval=_get_positive(env, "REQUEUE_INTERVAL_SECONDS", DEFAULT_REQUEUE_INTERVAL),
            user_not_found_retry=_get_positive(env, "USER_NOT_FOUND_RETRY_SECONDS", USER_NOT_FOUND_RETRY_INTERVAL),
            request_timeout=_get_positive(env, "REQUEST_TIMEOUT_SECONDS", 30.0),
            metrics_port=int(_get_positive(env, "METRICS_PORT", 8080, int)),
            max_workers=int(_get_positive(env, "MAX_WORKERS", 4, int)),
            watch_namespace=env.get("WATCH_NAMESPACE", "").strip(),
            log_level=_get_log_level(env, "LOG_LEVEL", cls.log_level),
            traces_enabled=_get_bool(env, "OTEL_TRACES_ENABLED", False),
            otlp_endpoint=env.get("OTEL_EXPORTER_OTLP_ENDPOINT", cls.otlp_endpoint),
            service_name=env.get("OTEL_SERVICE_NAME", cls.service_name),
        )

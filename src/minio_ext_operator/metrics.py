"""Prometheus metrics for the MinIO Ext Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "minio_ext_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "minio_ext_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "minio_ext_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "minio_ext_operator_resource_status_total",
    "Condition transitions recorded on resources",
    ["kind", "status"],
)

# Storage service metrics
storage_operations_total = Counter(
    "minio_ext_operator_storage_operations_total",
    "Total number of storage service operations",
    ["operation", "result"],
)

credentials_generated_total = Counter(
    "minio_ext_operator_credentials_generated_total",
    "Total number of generated user secret keys",
    ["reason"],
)

# API call metrics
api_call_total = Counter(
    "minio_ext_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "minio_ext_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

"""Tests for Prometheus metrics."""

from __future__ import annotations

from prometheus_client import REGISTRY

from minio_ext_operator.metrics import (
    credentials_generated_total,
    error_total,
    reconcile_duration_seconds,
    reconcile_total,
    storage_operations_total,
)


class TestMetricsExist:
    """Test that all expected metrics are defined."""

    def test_reconcile_total_exists(self):
        """Test reconcile_total counter exists."""
        # Prometheus counters don't include "_total" in their _name attribute
        assert reconcile_total._name == "minio_ext_operator_reconcile"

    def test_reconcile_duration_exists(self):
        """Test reconcile_duration_seconds histogram exists."""
        assert reconcile_duration_seconds._name == "minio_ext_operator_reconcile_duration_seconds"

    def test_storage_operations_exists(self):
        """Test storage_operations_total counter exists."""
        assert storage_operations_total._name == "minio_ext_operator_storage_operations"


class TestMetricsRecording:
    """Test that metrics record values."""

    def test_error_total_increments(self):
        """Test that labelled counters increment."""
        before = REGISTRY.get_sample_value(
            "minio_ext_operator_error_total", {"kind": "Bucket", "error_type": "ReconcileError"}
        ) or 0.0

        error_total.labels(kind="Bucket", error_type="ReconcileError").inc()

        after = REGISTRY.get_sample_value(
            "minio_ext_operator_error_total", {"kind": "Bucket", "error_type": "ReconcileError"}
        )
        assert after == before + 1

    def test_credentials_generated_increments(self):
        """Test the credential generation counter."""
        before = REGISTRY.get_sample_value(
            "minio_ext_operator_credentials_generated_total", {"reason": "created"}
        ) or 0.0

        credentials_generated_total.labels(reason="created").inc()

        assert REGISTRY.get_sample_value(
            "minio_ext_operator_credentials_generated_total", {"reason": "created"}
        ) == before + 1

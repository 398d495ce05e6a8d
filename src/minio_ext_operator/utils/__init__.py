"""Utility functions for the MinIO Ext Operator."""

from .conditions import (
    get_condition,
    is_condition_true,
    set_condition,
)
from .credentials import SystemRandomSource, generate_secret_key
from .errors import (
    CredentialSourceError,
    ReconcileError,
    StorageServiceError,
    has_error_code,
    sanitize_exception,
)
from .events import emit_event, emit_reconcile_failed, emit_reconcile_started
from .secrets import SecretRecordManager

__all__ = [
    "get_condition",
    "is_condition_true",
    "set_condition",
    "SystemRandomSource",
    "generate_secret_key",
    "CredentialSourceError",
    "ReconcileError",
    "StorageServiceError",
    "has_error_code",
    "sanitize_exception",
    "emit_event",
    "emit_reconcile_started",
    "emit_reconcile_failed",
    "SecretRecordManager",
]

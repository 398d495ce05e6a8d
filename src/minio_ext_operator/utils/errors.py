"""Error types and sanitization utilities to prevent information leakage."""

import re
from typing import Any


class ReconcileError(Exception):
    """A reconcile step failed.

    The message is prefixed with the step that produced it (``fetch``,
    ``create-bucket``, ``attach-policy``, ...) and the original exception is
    chained as ``__cause__``.
    """

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"{step}: {cause}")


class StorageServiceError(Exception):
    """An S3 or admin API call to the storage service failed.

    Args:
        code: Machine-readable error code reported by the service
            (e.g. ``NoSuchBucket``, ``XMinioAdminNoSuchUser``)
        message: Human-readable message
        operation: Storage operation that failed
    """

    def __init__(self, code: str, message: str, operation: str = ""):
        self.code = code
        self.message = message
        self.operation = operation
        super().__init__(f"{operation} failed: [{code}] {message}" if operation else f"[{code}] {message}")


class CredentialSourceError(RuntimeError):
    """The secure random source failed. Not retryable."""


def has_error_code(error: BaseException, code: str) -> bool:
    """Check whether an error (or the error it wraps) carries a storage code."""
    while error is not None:
        if isinstance(error, StorageServiceError) and error.code == code:
            return True
        error = error.__cause__
    return False


REDACTED = "[REDACTED]"

# Keys whose value follows as "key: value" or "key=value"
SENSITIVE_FIELDS = (
    "secret_access_key",
    "secretaccesskey",
    "secret_key",
    "secretkey",
    "session_token",
    "password",
    "token",
)

_FIELD_VALUE = re.compile(rf"\b({'|'.join(SENSITIVE_FIELDS)})([\"']?\s*[:=]\s*[\"']?)[^\s,;\)\"']+", re.IGNORECASE)
# Generated secret keys are long hex strings
_HEX_MATERIAL = re.compile(r"\b[0-9a-fA-F]{40,}\b")
# SigV4 credential scopes and signatures in URLs and headers
_SIGV4 = re.compile(r"(X-Amz-Signature=|X-Amz-Credential=|Credential=|Signature=)[^\s&,]+", re.IGNORECASE)


def sanitize_error_message(message: str) -> str:
    """Redact credential material from an error message."""
    sanitized = _FIELD_VALUE.sub(rf"\1\2{REDACTED}", message)
    sanitized = _SIGV4.sub(rf"\1{REDACTED}", sanitized)
    return _HEX_MATERIAL.sub(REDACTED, sanitized)


def sanitize_exception(error: BaseException) -> str:
    """Sanitized message of an exception, safe for events and logs."""
    return sanitize_error_message(str(error))

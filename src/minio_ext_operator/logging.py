"""Structured logging configuration for the MinIO Ext Operator."""

import json
import logging
import sys
from typing import Any

from .constants import CONTROLLER_NAME, SECRET_SECRET_KEY_FIELD

REDACTED = "***REDACTED***"

SECRET_LOG_FIELDS = frozenset({
    "access_key",
    "secret_key",
    "session_token",
    "password",
    SECRET_SECRET_KEY_FIELD,
})


class JsonFormatter(logging.Formatter):
    """Render every record as one JSON object per line.

    Records logged through ``log_resource_event`` carry their fields in the
    ``resource_event`` attribute; everything else (kopf, kubernetes, boto)
    is wrapped with its plain message.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
        }
        fields = getattr(record, "resource_event", None)
        if fields:
            payload.update(fields)
        else:
            payload["message"] = record.getMessage()
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging on stdout for the whole process."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def log_resource_event(
    logger: logging.Logger,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    controller: str = CONTROLLER_NAME,
    **kwargs: Any,
) -> None:
    """Log a structured event about one resource.

    Args:
        logger: Logger to emit on
        resource_kind: Kind of the resource (Bucket, Policy, User)
        resource_name: Name of the resource
        namespace: Namespace of the resource
        uid: UID of the resource
        event: Short event type (create, deletion, error, ...)
        reason: CamelCase reason, mirrors Kubernetes event reasons
        message: Human-readable message
        level: Logging level
        controller: Name reported as the emitting controller
        **kwargs: Extra fields; secret fields are redacted
    """
    fields = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    fields.update(sanitize_secrets(kwargs))
    logger.log(level, message, extra={"resource_event": fields})


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Replace the values of secret fields."""
    return {key: REDACTED if key in SECRET_LOG_FIELDS else value for key, value in log_data.items()}

"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_BUCKET_CREATED,
    EVENT_REASON_BUCKET_DELETED,
    EVENT_REASON_POLICY_APPLIED,
    EVENT_REASON_POLICY_ATTACHED,
    EVENT_REASON_POLICY_DELETED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_SECRET_CREATED,
    EVENT_REASON_USER_CREATED,
    EVENT_REASON_USER_DELETED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource object the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(body, reason=reason, message=message, type=type_)


def emit_reconcile_started(body: dict[str, Any]) -> None:
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_bucket_created(body: dict[str, Any], bucket_name: str) -> None:
    emit_event(body, EVENT_REASON_BUCKET_CREATED, f"Bucket {bucket_name} created")


def emit_bucket_deleted(body: dict[str, Any], bucket_name: str) -> None:
    emit_event(body, EVENT_REASON_BUCKET_DELETED, f"Bucket {bucket_name} deleted")


def emit_policy_applied(body: dict[str, Any], policy_name: str) -> None:
    emit_event(body, EVENT_REASON_POLICY_APPLIED, f"Policy {policy_name} applied")


def emit_policy_attached(body: dict[str, Any], policy_name: str, user_name: str) -> None:
    emit_event(body, EVENT_REASON_POLICY_ATTACHED, f"Policy {policy_name} attached to user {user_name}")


def emit_policy_deleted(body: dict[str, Any], policy_name: str) -> None:
    emit_event(body, EVENT_REASON_POLICY_DELETED, f"Policy {policy_name} deleted")


def emit_user_created(body: dict[str, Any], user_name: str) -> None:
    emit_event(body, EVENT_REASON_USER_CREATED, f"User {user_name} created")


def emit_user_deleted(body: dict[str, Any], user_name: str) -> None:
    emit_event(body, EVENT_REASON_USER_DELETED, f"User {user_name} deleted")


def emit_secret_created(body: dict[str, Any], secret_name: str) -> None:
    """Credentials were (re)generated; the message never carries the material."""
    emit_event(body, EVENT_REASON_SECRET_CREATED, f"Credentials stored in secret {secret_name}")

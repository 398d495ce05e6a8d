"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from ..models import BucketCondition, PolicyCondition, UserCondition

ConditionType = Union[BucketCondition, PolicyCondition, UserCondition]


def _type_name(condition_type: ConditionType | str) -> str:
    return condition_type.value if isinstance(condition_type, Enum) else condition_type


def get_condition(
    conditions: list[dict[str, Any]],
    condition_type: ConditionType | str,
) -> dict[str, Any] | None:
    """Return the condition entry of the given type, if present."""
    name = _type_name(condition_type)
    for cond in conditions:
        if cond.get("type") == name:
            return cond
    return None


def is_condition_true(conditions: list[dict[str, Any]], condition_type: ConditionType | str) -> bool:
    """Check whether a condition is present with status True."""
    cond = get_condition(conditions, condition_type)
    return cond is not None and str(cond.get("status", "")).lower() == "true"


def set_condition(
    conditions: list[dict[str, Any]],
    condition_type: ConditionType | str,
    satisfied: bool,
    reason: str,
    message: str = "",
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set a condition in place, adding it when absent.

    Args:
        conditions: Condition list from the record status
        condition_type: Condition to set
        satisfied: Whether the condition holds
        reason: CamelCase reason
        message: Human-readable message
        observed_generation: Generation the condition was computed from

    Returns:
        The same list, for chaining
    """
    status = "True" if satisfied else "False"
    entry: dict[str, Any] = {
        "type": _type_name(condition_type),
        "status": status,
        "reason": reason,
        "message": message,
    }
    if observed_generation is not None:
        entry["observedGeneration"] = observed_generation

    existing = get_condition(conditions, condition_type)
    if existing is None:
        entry["lastTransitionTime"] = datetime.now(timezone.utc).isoformat()
        conditions.append(entry)
        return conditions

    # The transition time only moves when the status flips
    if existing.get("status") == status and "lastTransitionTime" in existing:
        entry["lastTransitionTime"] = existing["lastTransitionTime"]
    else:
        entry["lastTransitionTime"] = datetime.now(timezone.utc).isoformat()
    existing.clear()
    existing.update(entry)
    return conditions

"""Builders turning resource specs into storage service documents."""

from .policy import bucket_policy, iam_policy

__all__ = ["bucket_policy", "iam_policy"]

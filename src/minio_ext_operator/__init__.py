"""Kubernetes operator managing MinIO buckets, policies and users."""

__version__ = "0.1.0"

"""Clients for the Kubernetes API server and the storage service."""

"""Storage service admin interface."""

from __future__ import annotations

from typing import Protocol


class StorageAdmin(Protocol):
    """Protocol defining the storage service operations used by the handlers.

    Implementations raise ``StorageServiceError`` with the service's error
    code on failure.
    """

    def bucket_exists(self, name: str) -> bool:
        """Check if a bucket exists."""
        ...

    def make_bucket(self, name: str) -> None:
        """Create a bucket."""
        ...

    def remove_bucket(self, name: str, force: bool = False) -> None:
        """Remove a bucket.

        Args:
            name: Bucket name
            force: Remove the bucket even if it still holds objects
        """
        ...

    def set_bucket_policy(self, name: str, policy: str) -> None:
        """Set the bucket policy from a JSON document."""
        ...

    def add_canned_policy(self, name: str, policy: str) -> None:
        """Create or replace a named IAM policy."""
        ...

    def remove_canned_policy(self, name: str) -> None:
        """Remove a named IAM policy."""
        ...

    def set_user_policy(self, policy_name: str, user: str) -> None:
        """Attach a named IAM policy to a user."""
        ...

    def add_user(self, access_key: str, secret_key: str) -> None:
        """Create a user or reset its secret key."""
        ...

    def enable_user(self, access_key: str) -> None:
        """Set the user account status to enabled."""
        ...

    def remove_user(self, access_key: str) -> None:
        """Remove a user."""
        ...

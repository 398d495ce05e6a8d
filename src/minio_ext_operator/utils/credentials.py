"""Generation of secret credential material."""

from __future__ import annotations

import secrets
from typing import Protocol

from ..constants import DEFAULT_CREDENTIAL_BYTES
from .errors import CredentialSourceError


class RandomSource(Protocol):
    """Source of random bytes used for credential material."""

    def token_bytes(self, nbytes: int) -> bytes:
        """Return ``nbytes`` random bytes."""
        ...


class SystemRandomSource:
    """Cryptographically secure source backed by the OS (``secrets``)."""

    def token_bytes(self, nbytes: int) -> bytes:
        return secrets.token_bytes(nbytes)


_default_source: RandomSource = SystemRandomSource()

_HEX_DIGITS = frozenset("0123456789abcdef")


def generate_secret_key(
    nbytes: int = DEFAULT_CREDENTIAL_BYTES,
    source: RandomSource | None = None,
) -> str:
    """Generate a hex-encoded secret key.

    Args:
        nbytes: Number of random bytes; the result has ``2 * nbytes`` characters
        source: Random source, defaults to the system CSPRNG

    Returns:
        Lowercase hex string

    Raises:
        CredentialSourceError: If the random source fails or returns a short read
    """
    if nbytes <= 0:
        raise ValueError(f"nbytes must be positive, got {nbytes}")

    source = source or _default_source
    try:
        data = source.token_bytes(nbytes)
    except Exception as e:
        raise CredentialSourceError(f"random source failed: {e}") from e

    if len(data) != nbytes:
        raise CredentialSourceError(f"random source returned {len(data)} bytes, expected {nbytes}")

    return data.hex()


def is_valid_secret_key(value: str | None, nbytes: int = DEFAULT_CREDENTIAL_BYTES) -> bool:
    """Check that a stored secret key looks like ``generate_secret_key`` output."""
    if not value or len(value) != 2 * nbytes:
        return False
    return all(c in _HEX_DIGITS for c in value)

"""Utilities for managing the credential Secret of a User."""

from __future__ import annotations

import base64
import logging
from typing import Any

import kopf
from kubernetes import client

from .. import metrics
from ..constants import (
    API_GROUP,
    CONTROLLER_NAME,
    DEFAULT_CREDENTIAL_BYTES,
    SECRET_ACCESS_KEY_FIELD,
    SECRET_SECRET_KEY_FIELD,
)
from ..models import Credentials, ObjectKey, User
from .credentials import RandomSource, generate_secret_key, is_valid_secret_key

logger = logging.getLogger(__name__)


def encode_secret_data(data: dict[str, str]) -> dict[str, str]:
    """Base64-encode Secret values."""
    return {k: base64.b64encode(v.encode("utf-8")).decode("utf-8") for k, v in data.items()}


def decode_secret_data(secret: client.V1Secret) -> dict[str, str]:
    """Decode all data from a Kubernetes secret.

    Args:
        secret: Secret as returned by the API

    Returns:
        Dictionary of secret data (decoded)

    Raises:
        ValueError: If a value is not base64 or not UTF-8
    """
    result = {}
    for key, value in (secret.data or {}).items():
        if isinstance(value, bytes):
            result[key] = value.decode("utf-8")
        else:
            result[key] = base64.b64decode(value, validate=True).decode("utf-8")
    return result


def build_credentials_secret(user: User, credentials: Credentials) -> dict[str, Any]:
    """Build the Secret body for a User, owned by that User."""
    secret = {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": user.secret_name,
            "namespace": user.namespace,
            "labels": {
                f"{API_GROUP}/managed-by": CONTROLLER_NAME,
                f"{API_GROUP}/user": user.name,
            },
        },
        "type": "Opaque",
        "data": encode_secret_data({
            SECRET_ACCESS_KEY_FIELD: credentials.access_key,
            SECRET_SECRET_KEY_FIELD: credentials.secret_key,
        }),
    }
    # Deleting the User garbage-collects the Secret
    kopf.append_owner_reference(secret, owner=user.body)
    return secret


class SecretRecordManager:
    """Ensures a User's companion Secret exists and holds valid credentials.

    Valid material is reused as is: credentials are only regenerated when
    the Secret is missing or malformed, never as a side effect of a
    periodic reconcile.
    """

    def __init__(
        self,
        store: Any,
        credential_bytes: int = DEFAULT_CREDENTIAL_BYTES,
        random_source: RandomSource | None = None,
    ) -> None:
        self.store = store
        self.credential_bytes = credential_bytes
        self.random_source = random_source

    def _generate(self, user: User, reason: str) -> Credentials:
        metrics.credentials_generated_total.labels(reason=reason).inc()
        return Credentials(
            access_key=user.name,
            secret_key=generate_secret_key(self.credential_bytes, self.random_source),
            generated=True,
        )

    def is_well_formed(self, user: User, data: dict[str, str]) -> bool:
        """The access key must be the user's identity and the secret key generated material."""
        return data.get(SECRET_ACCESS_KEY_FIELD) == user.name and is_valid_secret_key(
            data.get(SECRET_SECRET_KEY_FIELD), self.credential_bytes
        )

    def ensure(self, user: User) -> Credentials:
        """Create or repair the credential Secret of a user.

        A Secret that does not decode or fails ``is_well_formed`` is rewritten
        with fresh credentials.

        Args:
            user: Owning User resource

        Returns:
            The credentials stored in the Secret; ``generated`` is True when
            new material was written

        Raises:
            client.exceptions.ApiException: If reading or writing the Secret fails
            CredentialSourceError: If the random source fails
        """
        secret = self.store.get_secret(ObjectKey(user.namespace, user.secret_name))

        if secret is None:
            credentials = self._generate(user, "created")
            self.store.create_secret(user.namespace, build_credentials_secret(user, credentials))
            logger.info(f"Created secret {user.secret_name} for user {user.name}")
            return credentials

        try:
            data = decode_secret_data(secret)
        except ValueError as e:
            logger.warning(f"Secret {user.secret_name} does not decode: {type(e).__name__}")
            data = {}

        if self.is_well_formed(user, data):
            return Credentials(
                access_key=user.name,
                secret_key=data[SECRET_SECRET_KEY_FIELD],
            )

        credentials = self._generate(user, "malformed")
        secret.data = encode_secret_data({
            SECRET_ACCESS_KEY_FIELD: credentials.access_key,
            SECRET_SECRET_KEY_FIELD: credentials.secret_key,
        })
        self.store.replace_secret(secret)
        logger.warning(f"Secret {user.secret_name} was malformed, regenerated credentials for user {user.name}")
        return credentials

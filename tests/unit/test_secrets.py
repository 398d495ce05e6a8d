"""Tests for the credential Secret utilities."""

from __future__ import annotations

import base64
from unittest.mock import Mock, patch

import pytest
from kubernetes import client

from conftest import make_body
from minio_ext_operator.models import Credentials, ObjectKey, User
from minio_ext_operator.utils.errors import CredentialSourceError
from minio_ext_operator.utils.secrets import (
    SecretRecordManager,
    build_credentials_secret,
    decode_secret_data,
    encode_secret_data,
)


def _b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("utf-8")


@pytest.fixture
def user(store) -> User:
    return User(store.add("users", make_body("User", "alice")))


class TestSecretData:
    """Test cases for encoding and decoding Secret data."""

    def test_encode(self):
        """Test that values are base64-encoded."""
        assert encode_secret_data({"k": "value"}) == {"k": _b64("value")}

    def test_decode_base64(self):
        """Test decoding base64 values."""
        secret = client.V1Secret(data={"k": _b64("value")})

        assert decode_secret_data(secret) == {"k": "value"}

    def test_decode_bytes(self):
        """Test decoding raw bytes values."""
        secret = client.V1Secret(data={"k": b"value"})

        assert decode_secret_data(secret) == {"k": "value"}

    def test_decode_empty(self):
        """Test that a Secret without data decodes to an empty dict."""
        assert decode_secret_data(client.V1Secret(data=None)) == {}

    def test_decode_rejects_non_utf8(self):
        """Test that bytes that are not UTF-8 raise ValueError."""
        secret = client.V1Secret(data={"k": base64.b64encode(b"\xff" * 8).decode()})

        with pytest.raises(ValueError):
            decode_secret_data(secret)

    def test_decode_rejects_invalid_base64(self):
        """Test that text outside the base64 alphabet raises ValueError."""
        with pytest.raises(ValueError):
            decode_secret_data(client.V1Secret(data={"k": "not base64!"}))


class TestBuildCredentialsSecret:
    """Test cases for build_credentials_secret."""

    def test_secret_layout(self, user):
        """Test name, keys and owner reference of the Secret."""
        secret = build_credentials_secret(user, Credentials("alice", "ab" * 32))

        assert secret["metadata"]["name"] == "alice-credentials"
        assert secret["metadata"]["namespace"] == "default"
        assert secret["data"] == {
            "AWS_ACCESS_KEY_ID": _b64("alice"),
            "AWS_SECRET_ACCESS_KEY": _b64("ab" * 32),
        }
        owner = secret["metadata"]["ownerReferences"][0]
        assert owner["kind"] == "User"
        assert owner["name"] == "alice"
        assert owner["uid"] == "uid-alice"


class TestSecretRecordManager:
    """Test cases for SecretRecordManager.ensure."""

    def test_creates_missing_secret(self, store, user, random_source):
        """Test that a missing Secret is created with fresh material."""
        manager = SecretRecordManager(store, random_source=random_source)

        credentials = manager.ensure(user)

        assert credentials.generated is True
        assert credentials.access_key == "alice"
        assert len(credentials.secret_key) == 64
        stored = decode_secret_data(store.secrets[("default", "alice-credentials")])
        assert stored["AWS_SECRET_ACCESS_KEY"] == credentials.secret_key
        assert store.secrets[("default", "alice-credentials")].metadata.owner_references

    def test_reuses_valid_secret(self, store, user, random_source):
        """Test that valid material is returned unchanged and never rewritten."""
        manager = SecretRecordManager(store, random_source=random_source)
        first = manager.ensure(user)

        second = manager.ensure(user)

        assert second.generated is False
        assert second.secret_key == first.secret_key
        assert random_source.calls == 1
        assert ("replace_secret", "alice-credentials") not in store.calls

    def test_regenerates_malformed_secret(self, store, user, random_source):
        """Test that a short secret key is replaced in the existing Secret."""
        store.secrets[("default", "alice-credentials")] = client.V1Secret(
            metadata=client.V1ObjectMeta(name="alice-credentials", namespace="default"),
            data={"AWS_ACCESS_KEY_ID": _b64("alice"), "AWS_SECRET_ACCESS_KEY": _b64("short")},
        )
        manager = SecretRecordManager(store, random_source=random_source)

        credentials = manager.ensure(user)

        assert credentials.generated is True
        assert ("replace_secret", "alice-credentials") in store.calls
        stored = decode_secret_data(store.secrets[("default", "alice-credentials")])
        assert stored["AWS_SECRET_ACCESS_KEY"] == credentials.secret_key

    def test_regenerates_when_key_missing(self, store, user, random_source):
        """Test that a Secret without the access key field is repaired."""
        store.secrets[("default", "alice-credentials")] = client.V1Secret(
            metadata=client.V1ObjectMeta(name="alice-credentials", namespace="default"),
            data={"AWS_SECRET_ACCESS_KEY": _b64("a" * 64)},
        )
        manager = SecretRecordManager(store, random_source=random_source)

        assert manager.ensure(user).generated is True

    def _seed(self, store, data: dict[str, str]) -> None:
        store.secrets[("default", "alice-credentials")] = client.V1Secret(
            metadata=client.V1ObjectMeta(name="alice-credentials", namespace="default"),
            data=data,
        )

    def test_regenerates_foreign_access_key(self, store, user, random_source):
        """Test that an access key other than the user's name is rewritten."""
        self._seed(store, {"AWS_ACCESS_KEY_ID": _b64("mallory"), "AWS_SECRET_ACCESS_KEY": _b64("ab" * 32)})
        manager = SecretRecordManager(store, random_source=random_source)

        credentials = manager.ensure(user)

        assert credentials.generated is True
        assert credentials.access_key == "alice"
        stored = decode_secret_data(store.secrets[("default", "alice-credentials")])
        assert stored == {"AWS_ACCESS_KEY_ID": "alice", "AWS_SECRET_ACCESS_KEY": credentials.secret_key}

    def test_regenerates_non_utf8_value(self, store, user, random_source):
        """Test that a value that does not decode counts as malformed."""
        self._seed(store, {
            "AWS_ACCESS_KEY_ID": _b64("alice"),
            "AWS_SECRET_ACCESS_KEY": base64.b64encode(b"\xff" * 64).decode(),
        })
        manager = SecretRecordManager(store, random_source=random_source)

        credentials = manager.ensure(user)

        assert credentials.generated is True
        assert ("replace_secret", "alice-credentials") in store.calls
        stored = decode_secret_data(store.secrets[("default", "alice-credentials")])
        assert stored["AWS_SECRET_ACCESS_KEY"] == credentials.secret_key

    def test_regenerates_invalid_base64(self, store, user, random_source):
        """Test that a value outside the base64 alphabet counts as malformed."""
        self._seed(store, {"AWS_ACCESS_KEY_ID": "%%%", "AWS_SECRET_ACCESS_KEY": _b64("ab" * 32)})
        manager = SecretRecordManager(store, random_source=random_source)

        assert manager.ensure(user).generated is True
        stored = decode_secret_data(store.secrets[("default", "alice-credentials")])
        assert stored["AWS_ACCESS_KEY_ID"] == "alice"

    def test_regenerates_non_hex_secret_key(self, store, user, random_source):
        """Test that a secret key of the right length but not hex is rewritten."""
        self._seed(store, {"AWS_ACCESS_KEY_ID": _b64("alice"), "AWS_SECRET_ACCESS_KEY": _b64("z" * 64)})
        manager = SecretRecordManager(store, random_source=random_source)

        assert manager.ensure(user).generated is True

    def test_read_failure_propagates(self, user):
        """Test that errors other than not-found are raised."""
        failing_store = Mock()
        failing_store.get_secret.side_effect = client.exceptions.ApiException(status=500)
        manager = SecretRecordManager(failing_store)

        with pytest.raises(client.exceptions.ApiException):
            manager.ensure(user)
        failing_store.create_secret.assert_not_called()

    def test_random_source_failure_writes_nothing(self, store, user):
        """Test that a failing source raises before any Secret is written."""
        source = Mock()
        source.token_bytes.side_effect = OSError("no entropy")
        manager = SecretRecordManager(store, random_source=source)

        with pytest.raises(CredentialSourceError):
            manager.ensure(user)
        assert store.secrets == {}

    def test_looks_up_secret_by_user_name(self, user):
        """Test that the Secret name is derived from the user."""
        mock_store = Mock()
        mock_store.get_secret.return_value = None
        manager = SecretRecordManager(mock_store)

        with patch("minio_ext_operator.utils.secrets.metrics"):
            manager.ensure(user)

        mock_store.get_secret.assert_called_once_with(ObjectKey("default", "alice-credentials"))
        assert mock_store.create_secret.call_args[0][0] == "default"

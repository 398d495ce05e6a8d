"""Handler for User CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    API_GROUP_VERSION,
    DEFAULT_REQUEUE_INTERVAL,
    ERR_NO_SUCH_USER,
    FINALIZER_USER,
    KIND_USER,
    PLURAL_USERS,
)
from ..models import User, UserCondition
from ..services.kubernetes import RecordStore
from ..services.minio import StorageAdmin
from ..utils.conditions import is_condition_true
from ..utils.errors import ReconcileError, has_error_code
from ..utils.events import emit_secret_created, emit_user_created, emit_user_deleted
from ..utils.secrets import SecretRecordManager
from .base import BaseHandler, ReconcileResult
from .shared import get_config, get_secret_manager, get_storage, get_store, run_reconcile


class UserHandler(BaseHandler[User]):
    """Handler for User resources.

    The storage account uses the resource name as access key. Its secret
    key lives only in the companion Secret, which is garbage-collected
    with the User through its owner reference.
    """

    kind = KIND_USER
    plural = PLURAL_USERS
    finalizer = FINALIZER_USER
    record_type = User

    def __init__(
        self,
        store: RecordStore,
        storage: StorageAdmin,
        secret_manager: SecretRecordManager,
        requeue_interval: float = DEFAULT_REQUEUE_INTERVAL,
    ) -> None:
        super().__init__(store, storage, requeue_interval)
        self.secret_manager = secret_manager

    def teardown(self, user: User) -> None:
        try:
            with self.step("remove-user"):
                self.storage.remove_user(user.name)
        except ReconcileError as e:
            if not has_error_code(e, ERR_NO_SUCH_USER):
                raise
            self.log_info(user, f"User {user.name} already removed", event="deletion", reason="NotFound")
            return

        self.log_info(user, f"User {user.name} removed", event="deletion", reason="Deleted")
        emit_user_deleted(user.body, user.name)

    def converge(self, user: User) -> ReconcileResult:
        created = is_condition_true(user.conditions, UserCondition.CREATED)
        secret_created = is_condition_true(user.conditions, UserCondition.SECRET_CREATED)
        if created and secret_created:
            return self.requeue(user)

        with self.step("create-secret"):
            credentials = self.secret_manager.ensure(user)
        if credentials.generated:
            emit_secret_created(user.body, user.secret_name)
        self.mark(user, UserCondition.SECRET_CREATED, "SecretCreated", f"Secret {user.secret_name} holds the credentials")

        # New material must reach the storage service even for an existing account
        if not created or credentials.generated:
            with self.step("create-user"):
                self.storage.add_user(user.name, credentials.secret_key)
            with self.step("enable-user"):
                self.storage.enable_user(user.name)
            self.log_info(user, f"User {user.name} created", event="create", reason="Created")
            emit_user_created(user.body, user.name)

        self.mark(user, UserCondition.CREATED, "UserCreated", f"User {user.name} exists")
        return self.requeue(user)


def get_handler() -> UserHandler:
    return UserHandler(get_store(), get_storage(), get_secret_manager(), get_config().requeue_interval)


@kopf.on.create(API_GROUP_VERSION, KIND_USER)
@kopf.on.update(API_GROUP_VERSION, KIND_USER)
@kopf.on.resume(API_GROUP_VERSION, KIND_USER)
@kopf.timer(API_GROUP_VERSION, KIND_USER, interval=get_config().requeue_interval)
def handle_user(
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Handle User resource reconciliation."""
    run_reconcile(get_handler(), namespace, name)


@kopf.on.delete(API_GROUP_VERSION, KIND_USER, optional=True)
def handle_user_delete(
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Handle User resource deletion."""
    run_reconcile(get_handler(), namespace, name)

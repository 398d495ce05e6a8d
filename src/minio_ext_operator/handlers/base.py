"""Base handler with the reconciliation state machine shared by all CRD handlers."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generic, Iterator, TypeVar

from .. import metrics
from ..constants import DEFAULT_REQUEUE_INTERVAL
from ..logging import log_resource_event
from ..models import ObjectKey, Resource
from ..services.kubernetes import RecordStore, is_not_found
from ..services.minio import StorageAdmin
from ..tracing import resource_attributes, trace_span
from ..utils.conditions import ConditionType, get_condition, set_condition
from ..utils.errors import CredentialSourceError, ReconcileError, sanitize_exception
from ..utils.events import emit_reconcile_failed, emit_reconcile_started

RecordT = TypeVar("RecordT", bound=Resource)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of one reconcile invocation.

    ``requeue_after`` is the delay before the next reconcile of the same
    key, or None when nothing needs to be scheduled (record gone or
    finalized).
    """

    requeue_after: float | None = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None


class BaseHandler(Generic[RecordT]):
    """Drives one resource kind toward its declared state.

    Subclasses provide the kind-specific capabilities (``teardown`` and
    ``converge``, optionally ``fetch``/``is_deleting``/``requeue_interval``);
    ``reconcile`` runs the same state machine for every kind:

    1. fetch the record by key
    2. if it is being deleted: teardown, drop the finalizer, stop
    3. otherwise make sure the finalizer is persisted
    4. converge and requeue
    """

    kind: str = ""
    plural: str = ""
    finalizer: str = ""
    record_type: type[RecordT]
    # Whether a missing record means "already deleted" rather than an error
    missing_is_done: bool = True

    def __init__(
        self,
        store: RecordStore,
        storage: StorageAdmin,
        requeue_interval: float = DEFAULT_REQUEUE_INTERVAL,
    ) -> None:
        """Initialize base handler.

        Args:
            store: Record store for the declared resources
            storage: Storage service admin client
            requeue_interval: Delay between two convergence passes, in seconds
        """
        self.store = store
        self.storage = storage
        self._requeue_interval = requeue_interval
        self.logger = logging.getLogger(__name__)

    def _log(
        self,
        level: int,
        record: Resource,
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        log_resource_event(
            self.logger,
            resource_kind=self.kind,
            resource_name=record.name,
            namespace=record.namespace,
            uid=record.uid,
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        record: Resource,
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        self._log(logging.INFO, record, message, event, reason, **kwargs)

    def log_warning(
        self,
        record: Resource,
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, record, message, event, reason, **kwargs)

    def log_error(
        self,
        record: Resource,
        message: str,
        error: BaseException | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            record: Resource the message is about
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__
            if isinstance(error, ReconcileError):
                kwargs["step"] = error.step
        self._log(logging.ERROR, record, message, event, reason, **kwargs)

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """Label failures of the enclosed calls with the step name."""
        try:
            with trace_span(name, kind=self.kind):
                yield
        except (ReconcileError, CredentialSourceError):
            raise
        except Exception as e:
            raise ReconcileError(name, e) from e

    def requeue_interval(self, record: RecordT) -> float:
        return self._requeue_interval

    def requeue(self, record: RecordT) -> ReconcileResult:
        return ReconcileResult(self.requeue_interval(record))

    def fetch(self, key: ObjectKey) -> RecordT | None:
        """Read the declared record; None if it is gone and that is acceptable."""
        try:
            body = self.store.get(self.plural, key)
        except Exception as e:
            if self.missing_is_done and is_not_found(e):
                return None
            raise ReconcileError("fetch", e) from e
        return self.record_type(body)

    def is_deleting(self, record: RecordT) -> bool:
        return record.deletion_timestamp is not None

    def teardown(self, record: RecordT) -> None:
        """Remove the external object. Must succeed if it is already gone."""
        raise NotImplementedError

    def converge(self, record: RecordT) -> ReconcileResult:
        """Bring the external object in line with the record."""
        raise NotImplementedError

    def _refresh(self, record: RecordT, stored: Any) -> None:
        # Keep the latest resourceVersion for the next write
        if isinstance(stored, dict):
            record.body = stored

    def mark(
        self,
        record: RecordT,
        condition: ConditionType,
        reason: str,
        message: str = "",
        satisfied: bool = True,
    ) -> bool:
        """Set a condition and persist the status right away.

        Nothing is written when the condition already has this status and
        reason. Returns True if the status was written.
        """
        current = get_condition(record.conditions, condition)
        if (
            current is not None
            and (str(current.get("status", "")).lower() == "true") == satisfied
            and current.get("reason") == reason
        ):
            return False

        set_condition(
            record.conditions,
            condition,
            satisfied,
            reason,
            message,
            observed_generation=record.metadata.get("generation"),
        )
        with self.step("update-status"):
            self._refresh(record, self.store.update_status(self.plural, record.body))

        metrics.resource_status_total.labels(kind=self.kind, status=f"{condition.value}={satisfied}").inc()
        return True

    def ensure_finalizer(self, record: RecordT) -> None:
        """Add and persist the finalizer if it is missing."""
        if record.add_finalizer(self.finalizer):
            with self.step("add-finalizer"):
                self._refresh(record, self.store.update(self.plural, record.body))
            self.log_info(record, "Finalizer added", reason="FinalizerAdded")

    def remove_finalizer(self, record: RecordT) -> None:
        """Remove and persist the finalizer if it is present."""
        if record.remove_finalizer(self.finalizer):
            with self.step("remove-finalizer"):
                self._refresh(record, self.store.update(self.plural, record.body))
            self.log_info(record, "Finalizer removed", event="deletion", reason="FinalizerRemoved")

    def reconcile(self, key: ObjectKey) -> ReconcileResult:
        """Run the state machine once for the given key."""
        with trace_span(f"reconcile_{self.kind.lower()}", attributes=resource_attributes(self.kind, key.namespace, key.name)):
            record = self.fetch(key)
            if record is None:
                self.logger.info(f"{self.kind} {key} not found, nothing to do")
                return ReconcileResult()

            emit_reconcile_started(record.body)
            try:
                if self.is_deleting(record):
                    self.log_info(record, f"{self.kind} {record.name} is being deleted", event="deletion", reason="Deletion")
                    self.teardown(record)
                    self.remove_finalizer(record)
                    return ReconcileResult()

                self.ensure_finalizer(record)
                return self.converge(record)
            except Exception as e:
                self.log_error(record, "Reconciliation failed", error=e, reason="ReconciliationFailed")
                emit_reconcile_failed(record.body, f"Reconciliation failed: {sanitize_exception(e)}")
                raise

    def reconcile_with_metrics(self, key: ObjectKey) -> ReconcileResult:
        """Execute reconciliation with metrics.

        Args:
            key: Namespace/name of the record

        Returns:
            The reconcile result
        """
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            result = self.reconcile(key)
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
            return result
        except Exception as e:
            metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

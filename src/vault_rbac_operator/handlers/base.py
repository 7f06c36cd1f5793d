"""Base reconciler with the state machine shared by every watched kind."""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Any, Callable

from .. import metrics
from ..constants import CONTROLLER_NAME, EVENT_REASON_ERROR, EVENT_REASON_IGNORED, EVENT_REASON_SYNCED
from ..logging import log_resource_event
from ..resources import KubeObject, wrap
from ..services.kubernetes.base import ObjectStore
from ..services.vault.client import VaultGateway
from ..tracing import trace_span
from ..utils.context import with_correlation_id
from ..utils.errors import NotFoundError, ReconcileCancelled, sanitize_exception
from ..utils.events import emit_event
from ..utils.finalizers import FinalizerState, add_finalizer, remove_finalizer

EmitFn = Callable[..., None]


class ReconcileState(enum.Enum):
    """Where a single reconcile left the object."""

    ACTIVE_SYNCED = "synced"
    IGNORED = "ignored"
    PENDING_DELETE = "pending_delete"
    GONE = "gone"


class BaseReconciler:
    """Drive one kind of object towards its desired state in Vault.

    A reconcile is triggered with only a namespace and name. The object is
    fetched fresh, classified, and handed to the create/update or delete
    branch implemented by the subclass. Failures are logged, emitted as a
    Warning event and re-raised; nothing is retried in place.
    """

    kind = ""

    def __init__(
        self,
        store: ObjectStore,
        gateway: VaultGateway,
        auth_mount: str = "kubernetes",
        use_finalizers: bool = False,
        emit: EmitFn | None = None,
        cancelled: threading.Event | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            store: Object store used for fetches and finalizer updates
            gateway: Vault gateway applying the desired state
            auth_mount: Mount path of the Kubernetes auth method
            use_finalizers: Whether to hold objects until Vault cleanup ran
            emit: Event emitter, defaults to kopf events
            cancelled: Set when the operator shuts down
        """
        self.store = store
        self.gateway = gateway
        self.auth_mount = auth_mount
        self.use_finalizers = use_finalizers
        self.emit = emit or emit_event
        self.cancelled = cancelled or threading.Event()
        self.logger = logging.getLogger(__name__)

    def log(
        self,
        obj: KubeObject | None,
        message: str,
        event: str = "info",
        reason: str = "Info",
        level: int = logging.INFO,
        namespace: str = "",
        name: str = "",
        **kwargs: Any,
    ) -> None:
        """Log a structured message about the object being reconciled."""
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=obj.name if obj else name,
            namespace=obj.namespace if obj else namespace,
            uid=obj.uid if obj else "unknown",
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def _emit(self, obj: KubeObject, reason: str, message: str, type_: str = "Normal") -> None:
        try:
            self.emit(obj.body, reason, message, type_=type_)
        except Exception as e:
            self.log(obj, f"Failed to emit {reason} event: {e}", event="warning", reason="EventFailed",
                     level=logging.WARNING)

    def check_cancelled(self) -> None:
        if self.cancelled.is_set():
            raise ReconcileCancelled(f"operator shutting down, abandoning {self.kind} reconcile")

    def ignore(self, obj: KubeObject, message: str) -> ReconcileState:
        self.log(obj, message, event="ignored", reason=EVENT_REASON_IGNORED)
        self._emit(obj, EVENT_REASON_IGNORED, message)
        return ReconcileState.IGNORED

    def synced(self, obj: KubeObject, message: str) -> ReconcileState:
        self.log(obj, message, event="synced", reason=EVENT_REASON_SYNCED)
        self._emit(obj, EVENT_REASON_SYNCED, message)
        return ReconcileState.ACTIVE_SYNCED

    def ensure_finalizer(self, obj: KubeObject) -> None:
        """Add the finalizer when cleanup is enabled and it is missing."""
        if not self.use_finalizers:
            return
        self.check_cancelled()
        if add_finalizer(self.store, obj) is not None:
            self.log(obj, "Added finalizer", event="finalizer", reason="FinalizerAdded")

    def release_finalizer(self, obj: KubeObject) -> None:
        """Strip the finalizer once Vault cleanup succeeded."""
        self.check_cancelled()
        if remove_finalizer(self.store, obj) is not None:
            self.log(obj, "Removed finalizer", event="finalizer", reason="FinalizerRemoved")

    def fetch(self, namespace: str, name: str) -> KubeObject:
        self.check_cancelled()
        return wrap(self.kind, self.store.get(self.kind, namespace, name))

    def reconcile(self, namespace: str, name: str) -> ReconcileState:
        """Reconcile the object with the given identity.

        Returns:
            The state the object was left in

        Raises:
            OperatorError: On any failure; the next trigger retries
        """
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()
        start_time = time.time()
        with with_correlation_id(), trace_span(
            f"reconcile_{self.kind.lower()}",
            kind=self.kind,
            attributes={"resource.namespace": namespace, "resource.name": name},
        ):
            try:
                state = self._reconcile(namespace, name)
                metrics.reconcile_total.labels(kind=self.kind, result=state.value).inc()
                return state
            except Exception as e:
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

    def _reconcile(self, namespace: str, name: str) -> ReconcileState:
        self.log(None, f"Reconciling {self.kind}", event="reconcile", reason="Reconciling",
                 namespace=namespace, name=name)
        try:
            obj = self.fetch(namespace, name)
        except NotFoundError:
            self.log(None, f"{self.kind} no longer exists", event="gone", reason="NotFound",
                     namespace=namespace, name=name)
            return ReconcileState.GONE
        except Exception as e:
            self.log(None, f"Unable to fetch {self.kind}: {sanitize_exception(e)}", event="error",
                     reason=EVENT_REASON_ERROR, level=logging.ERROR, namespace=namespace, name=name,
                     error_type=type(e).__name__)
            raise

        try:
            if obj.deletion_requested:
                return self._handle_deletion(obj)
            if obj.is_ignored():
                return self.ignore(obj, f"{self.kind} is ignored by the controller")
            return self.reconcile_create_update(obj)
        except Exception as e:
            message = sanitize_exception(e)
            self.log(obj, f"Reconciliation failed: {message}", event="error", reason=EVENT_REASON_ERROR,
                     level=logging.ERROR, error_type=type(e).__name__)
            self._emit(obj, EVENT_REASON_ERROR, message, type_="Warning")
            raise

    def _handle_deletion(self, obj: KubeObject) -> ReconcileState:
        if FinalizerState.of(obj) is FinalizerState.RELEASED:
            # Cleanup never enabled for this object, or already done
            self.log(obj, "Deletion requested without finalizer, nothing to clean up", event="deletion",
                     reason="Deletion")
            return ReconcileState.GONE
        self.log(obj, f"{self.kind} is being deleted", event="deletion", reason="Deletion",
                 state=ReconcileState.PENDING_DELETE.value)
        self.reconcile_delete(obj)
        return ReconcileState.GONE

    def reconcile_create_update(self, obj: KubeObject) -> ReconcileState:
        raise NotImplementedError

    def reconcile_delete(self, obj: KubeObject) -> None:
        raise NotImplementedError

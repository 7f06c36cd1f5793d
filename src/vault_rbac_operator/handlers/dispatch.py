"""Routing of watch triggers to the per-kind reconcilers."""

from __future__ import annotations

import logging
import threading

from .. import metrics
from ..config import NamespaceScope, OperatorConfig
from ..services.kubernetes.base import ObjectStore
from ..services.vault.client import VaultGateway
from ..utils.errors import UnknownObjectKind
from .base import BaseReconciler, EmitFn, ReconcileState
from .role import RoleReconciler
from .rolebinding import RoleBindingReconciler
from .serviceaccount import ServiceAccountReconciler

logger = logging.getLogger(__name__)


class Dispatcher:
    """Send (kind, namespace, name) triggers to the matching reconciler.

    Triggers for namespaces outside the configured scope are dropped here and
    never reach a reconciler.
    """

    def __init__(self, reconcilers: dict[str, BaseReconciler], scope: NamespaceScope) -> None:
        self.reconcilers = reconcilers
        self.scope = scope

    @classmethod
    def build(
        cls,
        store: ObjectStore,
        gateway: VaultGateway,
        cfg: OperatorConfig,
        emit: EmitFn | None = None,
        cancelled: threading.Event | None = None,
    ) -> Dispatcher:
        """Wire one reconciler per watched kind around shared collaborators."""
        reconcilers: dict[str, BaseReconciler] = {}
        for reconciler_cls in (RoleReconciler, RoleBindingReconciler, ServiceAccountReconciler):
            reconcilers[reconciler_cls.kind] = reconciler_cls(
                store,
                gateway,
                auth_mount=cfg.auth_mount,
                use_finalizers=cfg.use_finalizers,
                emit=emit,
                cancelled=cancelled,
            )
        return cls(reconcilers, cfg.scope)

    def dispatch(self, kind: str, namespace: str | None, name: str) -> ReconcileState | None:
        """Reconcile one object if its namespace is in scope.

        Returns:
            The reconcile outcome, or None when the trigger was filtered out

        Raises:
            UnknownObjectKind: If no reconciler handles the kind
        """
        if not self.scope.contains(namespace):
            metrics.triggers_filtered_total.labels(kind=kind).inc()
            logger.debug(f"Dropping {kind} {namespace}/{name} trigger: namespace out of scope")
            return None

        reconciler = self.reconcilers.get(kind)
        if reconciler is None:
            raise UnknownObjectKind(f"no reconciler registered for kind {kind!r}")
        return reconciler.reconcile(namespace, name)

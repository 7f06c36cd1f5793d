"""Main entry point for the Vault RBAC Operator."""

from __future__ import annotations

import logging
import threading
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from .config import OperatorConfig
from .constants import CONTROLLER_ANNOTATION_PREFIX, KIND_ROLE, KIND_ROLE_BINDING, KIND_SERVICE_ACCOUNT
from .handlers.dispatch import Dispatcher
from .services.kubernetes.client import KubernetesStore, load_kube_config
from .services.vault.client import VaultGateway
from .tracing import initialize_tracing
from .utils.errors import OperatorError, UnknownObjectKind, sanitize_exception

logger = logging.getLogger(__name__)

RBAC_GROUP = "rbac.authorization.k8s.io"

CONFIG = OperatorConfig.from_env()

# Set on shutdown; reconcilers check it before every external call
_cancelled = threading.Event()

_dispatcher: Dispatcher | None = None


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator and wire the reconcilers."""
    global _dispatcher

    structured_logging.setup_structured_logging()
    initialize_tracing()

    settings.posting.level = 0
    settings.networking.request_timeout = CONFIG.request_timeout
    settings.execution.max_workers = CONFIG.max_workers
    # Built-in kinds have no status subresource to keep handler progress in
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=CONTROLLER_ANNOTATION_PREFIX)
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(prefix=CONTROLLER_ANNOTATION_PREFIX)

    load_kube_config()
    store = KubernetesStore(request_timeout=CONFIG.request_timeout)
    gateway = VaultGateway.from_config(CONFIG.vault)
    _dispatcher = Dispatcher.build(store, gateway, CONFIG, cancelled=_cancelled)

    health.start_metrics_server(CONFIG.metrics_port, vault_check=gateway.check_health)

    logger.info(
        f"Starting vault-rbac-operator: auth mount {CONFIG.auth_mount}, "
        f"finalizers {'enabled' if CONFIG.use_finalizers else 'disabled'}"
    )


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Abort in-flight reconciles; they are redone on the next start."""
    _cancelled.set()


def _dispatch(kind: str, namespace: str | None, name: str) -> None:
    """Reconcile one object, turning operator failures into kopf retries.

    Every trigger re-reads the object, so a retry or a re-sync redoes the
    whole reconcile from current state.
    """
    if _dispatcher is None:
        raise kopf.TemporaryError("operator not configured yet", delay=CONFIG.retry_delay)
    try:
        _dispatcher.dispatch(kind, namespace, name)
    except UnknownObjectKind as e:
        raise kopf.PermanentError(str(e)) from e
    except OperatorError as e:
        raise kopf.TemporaryError(sanitize_exception(e), delay=CONFIG.retry_delay) from e


@kopf.on.create(RBAC_GROUP, "v1", "roles")
@kopf.on.update(RBAC_GROUP, "v1", "roles")
@kopf.on.resume(RBAC_GROUP, "v1", "roles")
@kopf.on.delete(RBAC_GROUP, "v1", "roles", id="cleanup", optional=True)
@kopf.timer(RBAC_GROUP, "v1", "roles", id="resync", interval=CONFIG.resync_interval)
def handle_role(namespace: str | None, name: str, **_: Any) -> None:
    """Handle Role changes, deletion and periodic re-sync."""
    _dispatch(KIND_ROLE, namespace, name)


@kopf.on.create(RBAC_GROUP, "v1", "rolebindings")
@kopf.on.update(RBAC_GROUP, "v1", "rolebindings")
@kopf.on.resume(RBAC_GROUP, "v1", "rolebindings")
@kopf.on.delete(RBAC_GROUP, "v1", "rolebindings", id="cleanup", optional=True)
@kopf.timer(RBAC_GROUP, "v1", "rolebindings", id="resync", interval=CONFIG.resync_interval)
def handle_rolebinding(namespace: str | None, name: str, **_: Any) -> None:
    """Handle RoleBinding changes, deletion and periodic re-sync."""
    _dispatch(KIND_ROLE_BINDING, namespace, name)


@kopf.on.create("v1", "serviceaccounts")
@kopf.on.update("v1", "serviceaccounts")
@kopf.on.resume("v1", "serviceaccounts")
@kopf.on.delete("v1", "serviceaccounts", id="cleanup", optional=True)
@kopf.timer("v1", "serviceaccounts", id="resync", interval=CONFIG.resync_interval)
def handle_serviceaccount(namespace: str | None, name: str, **_: Any) -> None:
    """Handle ServiceAccount changes, deletion and periodic re-sync."""
    _dispatch(KIND_SERVICE_ACCOUNT, namespace, name)

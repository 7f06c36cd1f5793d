"""Kubernetes object store backed by the official client."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import (
    CORE_API_VERSION,
    KIND_CONFIG_MAP,
    KIND_ROLE,
    KIND_ROLE_BINDING,
    KIND_SERVICE_ACCOUNT,
    RBAC_API_VERSION,
)
from ...utils.errors import ConflictError, NotFoundError, UnknownObjectKind
from ...utils.rate_limit import rate_limit_k8s

logger = logging.getLogger(__name__)

_API_VERSIONS = {
    KIND_ROLE: RBAC_API_VERSION,
    KIND_ROLE_BINDING: RBAC_API_VERSION,
    KIND_SERVICE_ACCOUNT: CORE_API_VERSION,
    KIND_CONFIG_MAP: CORE_API_VERSION,
}


def load_kube_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesStore:
    """Get, list and update the objects the reconcilers work on.

    Every object is returned as a camelCase dict with apiVersion and kind set,
    so bodies can be handed straight to kopf.event and back to update().
    """

    def __init__(self, api_client: client.ApiClient | None = None, request_timeout: float = 30.0) -> None:
        self.api_client = api_client or client.ApiClient()
        self.request_timeout = request_timeout
        rbac = client.RbacAuthorizationV1Api(self.api_client)
        core = client.CoreV1Api(self.api_client)

        self._readers: dict[str, Callable[..., Any]] = {
            KIND_ROLE: rbac.read_namespaced_role,
            KIND_ROLE_BINDING: rbac.read_namespaced_role_binding,
            KIND_SERVICE_ACCOUNT: core.read_namespaced_service_account,
            KIND_CONFIG_MAP: core.read_namespaced_config_map,
        }
        self._listers: dict[str, Callable[..., Any]] = {
            KIND_ROLE: rbac.list_namespaced_role,
            KIND_ROLE_BINDING: rbac.list_namespaced_role_binding,
            KIND_SERVICE_ACCOUNT: core.list_namespaced_service_account,
        }
        self._writers: dict[str, Callable[..., Any]] = {
            KIND_ROLE: rbac.replace_namespaced_role,
            KIND_ROLE_BINDING: rbac.replace_namespaced_role_binding,
            KIND_SERVICE_ACCOUNT: core.replace_namespaced_service_account,
        }

    def _to_body(self, kind: str, obj: Any) -> dict[str, Any]:
        body = self.api_client.sanitize_for_serialization(obj)
        # List items come back without apiVersion/kind
        body.setdefault("apiVersion", _API_VERSIONS[kind])
        body.setdefault("kind", kind)
        return body

    def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = rate_limit_k8s(fn)(*args, _request_timeout=self.request_timeout, **kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except ApiException as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            if e.status == 409:
                raise ConflictError(f"{operation} conflict: {e.reason}") from e
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    @staticmethod
    def _lookup(table: dict[str, Callable[..., Any]], kind: str) -> Callable[..., Any]:
        try:
            return table[kind]
        except KeyError:
            raise UnknownObjectKind(f"unsupported object kind {kind!r}") from None

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        reader = self._lookup(self._readers, kind)
        try:
            obj = self._call(f"get_{kind.lower()}", reader, name, namespace)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(kind, namespace, name) from e
            raise
        return self._to_body(kind, obj)

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        lister = self._lookup(self._listers, kind)
        result = self._call(f"list_{kind.lower()}", lister, namespace)
        return [self._to_body(kind, item) for item in result.items or []]

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        kind = body.get("kind", "")
        writer = self._lookup(self._writers, kind)
        meta = body.get("metadata", {})
        name, namespace = meta.get("name", ""), meta.get("namespace", "")
        try:
            obj = self._call(f"update_{kind.lower()}", writer, name, namespace, body)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(kind, namespace, name) from e
            raise
        logger.debug(f"Updated {kind} {namespace}/{name}")
        return self._to_body(kind, obj)

    def get_config_map_data(self, namespace: str, name: str) -> dict[str, str]:
        return self.get(KIND_CONFIG_MAP, namespace, name).get("data") or {}

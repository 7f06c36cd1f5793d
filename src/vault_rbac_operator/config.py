"""Operator configuration read from the environment."""

from __future__ import annotations

import os
import random
from dataclasses import dataclass, field
from typing import Any

from .constants import SYSTEM_NAMESPACES

DEFAULT_SA_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> list[str]:
    """Split a comma-separated environment variable, dropping empty items."""
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


@dataclass
class NamespaceScope:
    """Which namespaces the operator acts on."""

    include_namespaces: list[str] = field(default_factory=list)
    exclude_namespaces: list[str] = field(default_factory=list)
    include_system_namespaces: bool = False

    def contains(self, namespace: str | None) -> bool:
        """Check whether a namespace is in scope.

        An empty include list means every namespace is included. Exclusions
        always win, and system namespaces are dropped unless explicitly enabled.
        """
        if not namespace:
            return False
        if not self.include_system_namespaces and namespace in SYSTEM_NAMESPACES:
            return False
        if self.include_namespaces and namespace not in self.include_namespaces:
            return False
        return namespace not in self.exclude_namespaces


@dataclass
class VaultConfig:
    """Connection settings for the Vault client."""

    address: str = "http://127.0.0.1:8200"
    token: str | None = None
    token_file: str | None = None
    namespace: str | None = None
    ca_cert: str | None = None
    skip_verify: bool = False
    k8s_auth_role: str | None = None
    k8s_auth_mount: str = "kubernetes"
    k8s_token_path: str = DEFAULT_SA_TOKEN_PATH
    timeout: float = 30.0


@dataclass
class OperatorConfig:
    """Top-level operator settings."""

    auth_mount: str = "kubernetes"
    use_finalizers: bool = False
    scope: NamespaceScope = field(default_factory=NamespaceScope)
    vault: VaultConfig = field(default_factory=VaultConfig)
    metrics_port: int = 8080
    max_workers: int = 4
    request_timeout: float = 30.0
    resync_interval: float = 300.0
    retry_delay: float = 30.0
    leader_elect: bool = False
    peering_name: str = "vault-rbac-operator"
    peering_priority: int = 0

    @classmethod
    def from_env(cls) -> OperatorConfig:
        """Build the configuration from environment variables."""
        request_timeout = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
        return cls(
            auth_mount=os.getenv("AUTH_MOUNT", "kubernetes"),
            use_finalizers=_env_bool("USE_FINALIZERS"),
            scope=NamespaceScope(
                include_namespaces=_env_list("WATCH_NAMESPACES"),
                exclude_namespaces=_env_list("EXCLUDE_NAMESPACES"),
                include_system_namespaces=_env_bool("INCLUDE_SYSTEM_NAMESPACES"),
            ),
            vault=VaultConfig(
                address=os.getenv("VAULT_ADDR", "http://127.0.0.1:8200"),
                token=os.getenv("VAULT_TOKEN") or None,
                token_file=os.getenv("VAULT_TOKEN_FILE") or None,
                namespace=os.getenv("VAULT_NAMESPACE") or None,
                ca_cert=os.getenv("VAULT_CACERT") or None,
                skip_verify=_env_bool("VAULT_SKIP_VERIFY"),
                k8s_auth_role=os.getenv("VAULT_K8S_AUTH_ROLE") or None,
                k8s_auth_mount=os.getenv("VAULT_K8S_AUTH_MOUNT", "kubernetes"),
                k8s_token_path=os.getenv("VAULT_K8S_TOKEN_PATH", DEFAULT_SA_TOKEN_PATH),
                timeout=request_timeout,
            ),
            metrics_port=int(os.getenv("METRICS_PORT", "8080")),
            max_workers=int(os.getenv("MAX_WORKERS", "4")),
            request_timeout=request_timeout,
            resync_interval=float(os.getenv("RESYNC_INTERVAL_SECONDS", "300")),
            retry_delay=float(os.getenv("RETRY_DELAY_SECONDS", "30")),
            leader_elect=_env_bool("LEADER_ELECT"),
            peering_name=os.getenv("PEERING_NAME", "vault-rbac-operator"),
            peering_priority=int(os.getenv("PEERING_PRIORITY") or random.randint(1, 1_000_000)),
        )

    def run_options(self) -> dict[str, Any]:
        """Keyword arguments for kopf.run.

        With leader election enabled the replicas share a kopf peering object
        and only the highest-priority one handles events. Without
        PEERING_PRIORITY each replica draws a random priority so one of them
        leads. Otherwise peering is disabled and every replica acts alone.
        """
        include = self.scope.include_namespaces
        options: dict[str, Any] = {
            "clusterwide": not include,
            "namespaces": include,
            "standalone": not self.leader_elect,
        }
        if self.leader_elect:
            options["peering_name"] = self.peering_name
            options["priority"] = self.peering_priority
        return options

"""Vault gateway used by the reconcilers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import hvac
import requests
from hvac import exceptions as vault_exceptions

from ... import metrics
from ...builders.policy import dump_policy_document
from ...config import VaultConfig
from ...constants import ANNOTATION_POLICY_NAME, ANNOTATION_ROLE_NAME
from ...resources import KubeObject
from ...tracing import trace_span
from ...utils.errors import AuthorityRejected, AuthorityUnavailable
from ...utils.rate_limit import rate_limit_vault

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], hvac.Client]

# Errors meaning Vault understood the request and refused it
_REJECTIONS = (
    vault_exceptions.InvalidRequest,
    vault_exceptions.Unauthorized,
    vault_exceptions.Forbidden,
)


def default_resource_name(namespace: str, name: str) -> str:
    return f"{namespace}-{name}"


def create_vault_client(cfg: VaultConfig) -> hvac.Client:
    """Build an authenticated hvac client.

    The token comes from VAULT_TOKEN_FILE when set, otherwise from the static
    token (hvac itself falls back to VAULT_TOKEN and ~/.vault-token). When a
    Kubernetes auth role is configured, the client logs in with the pod's
    service account token instead.

    Raises:
        AuthorityUnavailable: If credentials cannot be read or login fails
    """
    token = cfg.token
    try:
        if cfg.token_file:
            with open(cfg.token_file) as f:
                token = f.read().strip()

        verify: bool | str = False if cfg.skip_verify else (cfg.ca_cert or True)
        cli = hvac.Client(
            url=cfg.address,
            token=token,
            namespace=cfg.namespace,
            verify=verify,
            timeout=cfg.timeout,
        )

        if cfg.k8s_auth_role:
            with open(cfg.k8s_token_path) as f:
                jwt = f.read().strip()
            cli.auth.kubernetes.login(role=cfg.k8s_auth_role, jwt=jwt, mount_point=cfg.k8s_auth_mount)
    except OSError as e:
        raise AuthorityUnavailable(f"unable to read Vault credentials: {e}") from e
    except (vault_exceptions.VaultError, requests.exceptions.RequestException) as e:
        raise AuthorityUnavailable(f"unable to authenticate to Vault: {e}") from e
    return cli


def create_health_client(cfg: VaultConfig) -> hvac.Client:
    """Build a client without credentials for the unauthenticated sys endpoints."""
    verify: bool | str = False if cfg.skip_verify else (cfg.ca_cert or True)
    return hvac.Client(url=cfg.address, namespace=cfg.namespace, verify=verify, timeout=cfg.timeout)


class VaultGateway:
    """Idempotent writes and deletes of Vault policies and auth roles.

    A fresh client is taken from the factory for every call, so a rotated
    token file or a re-login is picked up without restarting the operator.
    """

    def __init__(self, client_factory: ClientFactory, health_client_factory: ClientFactory | None = None) -> None:
        self.client_factory = client_factory
        self.health_client_factory = health_client_factory or client_factory
        self._health_client: hvac.Client | None = None

    @classmethod
    def from_config(cls, cfg: VaultConfig) -> VaultGateway:
        return cls(lambda: create_vault_client(cfg), lambda: create_health_client(cfg))

    def policy_name(self, obj: KubeObject) -> str:
        """Policy name from the policy-name annotation, or "<namespace>-<name>"."""
        return obj.annotations.get(ANNOTATION_POLICY_NAME) or default_resource_name(obj.namespace, obj.name)

    def role_name(self, obj: KubeObject) -> str:
        """Auth role name from the role-name annotation, or "<namespace>-<name>"."""
        return obj.annotations.get(ANNOTATION_ROLE_NAME) or default_resource_name(obj.namespace, obj.name)

    @staticmethod
    def binding_path(mount: str, name: str) -> str:
        return f"auth/{mount.strip('/')}/role/{name}"

    def _client(self) -> hvac.Client:
        try:
            return self.client_factory()
        except AuthorityUnavailable:
            raise
        except Exception as e:
            raise AuthorityUnavailable(f"failed to get vault client: {e}") from e

    def _execute(
        self,
        operation: str,
        target: str,
        fn: Callable[[hvac.Client], Any],
        missing_ok: bool = False,
    ) -> None:
        start_time = time.time()
        with trace_span(f"vault_{operation}", attributes={"vault.target": target}):
            try:
                rate_limit_vault(fn)(self._client())
                metrics.vault_operations_total.labels(operation=operation, result="success").inc()
            except vault_exceptions.InvalidPath as e:
                if not missing_ok:
                    metrics.vault_operations_total.labels(operation=operation, result="rejected").inc()
                    raise AuthorityRejected(f"{operation} {target}: path not found") from e
                logger.debug(f"{operation} {target}: already absent")
                metrics.vault_operations_total.labels(operation=operation, result="absent").inc()
            except _REJECTIONS as e:
                metrics.vault_operations_total.labels(operation=operation, result="rejected").inc()
                raise AuthorityRejected(f"{operation} {target} rejected by vault: {e}") from e
            except (vault_exceptions.VaultError, requests.exceptions.RequestException) as e:
                metrics.vault_operations_total.labels(operation=operation, result="error").inc()
                raise AuthorityUnavailable(f"{operation} {target} failed: {e}") from e
            except AuthorityUnavailable:
                metrics.vault_operations_total.labels(operation=operation, result="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(api_type="vault", operation=operation).observe(duration)

    def put_policy(self, name: str, document: str | dict[str, Any]) -> None:
        """Create or overwrite a named policy."""
        policy = document if isinstance(document, str) else dump_policy_document(document)
        self._execute(
            "put_policy",
            name,
            lambda cli: cli.sys.create_or_update_policy(name=name, policy=policy),
        )

    def delete_policy(self, name: str) -> None:
        """Delete a named policy; an absent policy is not an error."""
        self._execute(
            "delete_policy",
            name,
            lambda cli: cli.sys.delete_policy(name=name),
            missing_ok=True,
        )

    def put_binding_record(self, mount: str, name: str, params: dict[str, Any]) -> None:
        """Create or overwrite the auth role at auth/<mount>/role/<name>."""
        path = self.binding_path(mount, name)
        self._execute(
            "put_binding_record",
            path,
            lambda cli: cli.adapter.post(f"/v1/{path}", json=params),
        )

    def delete_binding_record(self, mount: str, name: str) -> None:
        """Delete the auth role at auth/<mount>/role/<name>; absent is success."""
        path = self.binding_path(mount, name)
        self._execute(
            "delete_binding_record",
            path,
            lambda cli: cli.adapter.delete(f"/v1/{path}"),
            missing_ok=True,
        )

    def check_health(self) -> bool:
        """Return True when Vault answers and is unsealed.

        The seal status endpoint needs no token, so health checks never log in. The
        health client is built once and reused.
        """
        try:
            if self._health_client is None:
                self._health_client = self.health_client_factory()
            return not self._health_client.sys.is_sealed()
        except Exception as e:
            logger.warning(f"Vault health check failed: {e}")
            return False

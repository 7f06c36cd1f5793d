"""Reconciler for ServiceAccounts declaring their own Vault policy."""

from __future__ import annotations

from ..builders.auth_role import resolve_auth_parameters
from ..builders.policy import resolve_identity_policy
from ..constants import KIND_SERVICE_ACCOUNT
from ..resources import ServiceAccount
from .base import BaseReconciler, ReconcileState


class ServiceAccountReconciler(BaseReconciler):
    """Write a ServiceAccount's policy and an auth role bound to it."""

    kind = KIND_SERVICE_ACCOUNT

    def reconcile_create_update(self, obj: ServiceAccount) -> ReconcileState:
        if not obj.has_acl_source():
            return self.ignore(obj, "ServiceAccount does not define any Vault ACLs")

        self.check_cancelled()
        policy = resolve_identity_policy(obj, self.store.get_config_map_data)
        policy_name = self.gateway.policy_name(obj)

        self.check_cancelled()
        self.gateway.put_policy(policy_name, policy)

        params = resolve_auth_parameters(obj, obj.subject_names(), [policy_name], self.store.get_config_map_data)
        self.check_cancelled()
        self.gateway.put_binding_record(self.auth_mount, self.gateway.role_name(obj), params)

        self.ensure_finalizer(obj)
        return self.synced(obj, "ServiceAccount synced to Vault")

    def reconcile_delete(self, obj: ServiceAccount) -> None:
        self.check_cancelled()
        self.gateway.delete_policy(self.gateway.policy_name(obj))
        self.check_cancelled()
        self.gateway.delete_binding_record(self.auth_mount, self.gateway.role_name(obj))
        self.release_finalizer(obj)

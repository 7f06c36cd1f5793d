"""Reconciler for RoleBindings opted in to Vault auth roles."""

from __future__ import annotations

from ..builders.auth_role import resolve_auth_parameters
from ..builders.policy import has_access_rules
from ..constants import KIND_ROLE, KIND_ROLE_BINDING
from ..resources import Role, RoleBinding
from ..utils.errors import ConfigurationMissing, NotFoundError
from .aggregator import aggregate_bound_policies
from .base import BaseReconciler, ReconcileState


class RoleBindingReconciler(BaseReconciler):
    """Bind a RoleBinding's service accounts to its Role's policies in Vault.

    The auth role is named after the binding. Its policy list is recomputed
    from every active sibling binding of the same Role, so deleting one
    binding shrinks the list instead of removing the auth role while other
    bindings still need it.
    """

    kind = KIND_ROLE_BINDING

    def _fetch_role(self, obj: RoleBinding) -> Role:
        self.check_cancelled()
        try:
            return Role(self.store.get(KIND_ROLE, obj.namespace, obj.role_name))
        except NotFoundError as e:
            raise ConfigurationMissing(f"unable to fetch role {obj.namespace}/{obj.role_name}") from e

    def _write_binding_record(self, obj: RoleBinding, policies: list[str]) -> None:
        params = resolve_auth_parameters(obj, obj.subject_names(), policies, self.store.get_config_map_data)
        self.check_cancelled()
        self.gateway.put_binding_record(self.auth_mount, self.gateway.role_name(obj), params)

    def reconcile_create_update(self, obj: RoleBinding) -> ReconcileState:
        if not obj.references_role:
            return self.ignore(obj, "RoleBinding does not reference a namespaced Role")

        role = self._fetch_role(obj)
        if role.is_ignored() or not has_access_rules(role.rules):
            return self.ignore(obj, "RoleBinding's Role does not contain Vault ACLs")

        self.check_cancelled()
        policies = aggregate_bound_policies(self.store, self.gateway, obj)
        self._write_binding_record(obj, policies)
        self.ensure_finalizer(obj)
        return self.synced(obj, "RoleBinding synced to Vault")

    def reconcile_delete(self, obj: RoleBinding) -> None:
        self.check_cancelled()
        remaining = aggregate_bound_policies(self.store, self.gateway, obj)
        if remaining:
            self.log(obj, f"Other bindings still reference role {obj.role_name}, rewriting auth role",
                     event="deletion", reason="ReducedRewrite", policies=remaining)
            self._write_binding_record(obj, remaining)
        else:
            self.check_cancelled()
            self.gateway.delete_binding_record(self.auth_mount, self.gateway.role_name(obj))
        self.release_finalizer(obj)

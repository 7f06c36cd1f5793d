"""Reconciler for Roles carrying Vault rules."""

from __future__ import annotations

from ..builders.policy import has_access_rules, policy_document_json
from ..constants import KIND_ROLE
from ..resources import Role
from .base import BaseReconciler, ReconcileState


class RoleReconciler(BaseReconciler):
    """Keep one Vault policy per Role in sync with the Role's Vault rules."""

    kind = KIND_ROLE

    def reconcile_create_update(self, obj: Role) -> ReconcileState:
        if not has_access_rules(obj.rules):
            return self.ignore(obj, "Role does not contain any Vault ACLs")

        self.check_cancelled()
        self.gateway.put_policy(self.gateway.policy_name(obj), policy_document_json(obj.rules))
        self.ensure_finalizer(obj)
        return self.synced(obj, "Role policy synced to Vault")

    def reconcile_delete(self, obj: Role) -> None:
        self.check_cancelled()
        self.gateway.delete_policy(self.gateway.policy_name(obj))
        self.release_finalizer(obj)

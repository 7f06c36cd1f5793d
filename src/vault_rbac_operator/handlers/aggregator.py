"""Fan-in of the policies bound through a Role's sibling RoleBindings."""

from __future__ import annotations

import logging

from ..builders.policy import has_access_rules
from ..constants import KIND_ROLE, KIND_ROLE_BINDING
from ..resources import Role, RoleBinding
from ..services.kubernetes.base import ObjectStore
from ..services.vault.client import VaultGateway
from ..utils.errors import NotFoundError

logger = logging.getLogger(__name__)


def aggregate_bound_policies(store: ObjectStore, gateway: VaultGateway, binding: RoleBinding) -> list[str]:
    """Recompute the policy names bound through every binding of a Role.

    Every RoleBinding in the binding's namespace is scanned. Siblings that are
    being deleted, are not opted in, are ignored, or reference another Role
    are skipped. For the rest the referenced Role is fetched and its policy
    name included, unless the Role is missing, ignored or has no Vault rules.

    The answer is derived from current store state only, so a missed or
    duplicated trigger is corrected by the next one. The binding passed in is
    not treated specially: while it is active it counts as its own sibling,
    once it is being deleted it drops out.

    Args:
        store: Object store to list bindings and fetch roles from
        gateway: Resolves a Role's policy name
        binding: The RoleBinding being reconciled

    Returns:
        Policy names without duplicates, in store list order
    """
    policies: list[str] = []
    roles: dict[str, Role | None] = {}

    for body in store.list(KIND_ROLE_BINDING, binding.namespace):
        sibling = RoleBinding(body)
        if not sibling.is_active():
            continue
        if not sibling.references_role or sibling.role_name != binding.role_name:
            continue

        if sibling.role_name not in roles:
            try:
                roles[sibling.role_name] = Role(store.get(KIND_ROLE, sibling.namespace, sibling.role_name))
            except NotFoundError:
                roles[sibling.role_name] = None
        role = roles[sibling.role_name]

        if role is None or role.is_ignored() or not has_access_rules(role.rules):
            continue

        name = gateway.policy_name(role)
        if name not in policies:
            policies.append(name)

    logger.debug(f"Aggregated policies for {binding!r}: {policies}")
    return policies

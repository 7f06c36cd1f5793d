"""Tests for the sibling RoleBinding fan-in."""

from __future__ import annotations

from factories import make_binding, make_role
from vault_rbac_operator.constants import ANNOTATION_IGNORE, ANNOTATION_POLICY_NAME
from vault_rbac_operator.handlers.aggregator import aggregate_bound_policies
from vault_rbac_operator.resources import RoleBinding


class TestAggregateBoundPolicies:
    """Test cases for aggregate_bound_policies."""

    def test_single_binding(self, store, gateway):
        """Test that an active binding yields its Role's policy."""
        store.add(make_role(), make_binding())
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == ["default-reader"]

    def test_siblings_collapse_to_one_policy(self, store, gateway):
        """Test that two bindings of the same Role yield the policy once."""
        store.add(make_role(), make_binding(name="b1"), make_binding(name="b2"))
        binding = RoleBinding(store.get("RoleBinding", "default", "b1"))

        assert aggregate_bound_policies(store, gateway, binding) == ["default-reader"]

    def test_ignored_sibling_skipped(self, store, gateway):
        """Test that a binding without the opt-in does not count."""
        store.add(
            make_role(),
            make_binding(name="b1"),
            make_binding(name="b2", annotations={ANNOTATION_IGNORE: "true"}),
        )
        b2 = RoleBinding(store.get("RoleBinding", "default", "b2"))

        # b1 still contributes even though the reconciled binding is ignored
        assert aggregate_bound_policies(store, gateway, b2) == ["default-reader"]

    def test_deleting_binding_drops_out(self, store, gateway):
        """Test that the only binding, once being deleted, leaves nothing."""
        store.add(make_role(), make_binding(deleting=True))
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == []

    def test_other_role_not_counted(self, store, gateway):
        """Test that bindings of a different Role are skipped."""
        store.add(
            make_role(name="reader"),
            make_role(name="writer"),
            make_binding(name="b1", role="reader", deleting=True),
            make_binding(name="b2", role="writer"),
        )
        b1 = RoleBinding(store.get("RoleBinding", "default", "b1"))

        assert aggregate_bound_policies(store, gateway, b1) == []

    def test_cluster_role_reference_skipped(self, store, gateway):
        """Test that bindings to a ClusterRole of the same name are skipped."""
        store.add(
            make_role(),
            make_binding(name="b1", deleting=True),
            make_binding(name="b2", role_kind="ClusterRole"),
        )
        b1 = RoleBinding(store.get("RoleBinding", "default", "b1"))

        assert aggregate_bound_policies(store, gateway, b1) == []

    def test_missing_role(self, store, gateway):
        """Test that a binding to an absent Role yields nothing."""
        store.add(make_binding())
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == []

    def test_role_without_vault_rules(self, store, gateway):
        """Test that a Role with only Kubernetes rules yields nothing."""
        store.add(
            make_role(rules=[{"apiGroups": [""], "resources": ["pods"], "verbs": ["get"]}]),
            make_binding(),
        )
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == []

    def test_ignored_role(self, store, gateway):
        """Test that an ignored Role yields nothing."""
        store.add(make_role(annotations={ANNOTATION_IGNORE: "true"}), make_binding())
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == []

    def test_policy_name_annotation(self, store, gateway):
        """Test that the Role's policy-name annotation is used."""
        store.add(make_role(annotations={ANNOTATION_POLICY_NAME: "shared-reader"}), make_binding())
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == ["shared-reader"]

    def test_other_namespace_not_scanned(self, store, gateway):
        """Test that bindings in other namespaces are not siblings."""
        store.add(
            make_role(namespace="default"),
            make_role(namespace="other"),
            make_binding(namespace="default", deleting=True),
            make_binding(namespace="other"),
        )
        binding = RoleBinding(store.get("RoleBinding", "default", "reader-binding"))

        assert aggregate_bound_policies(store, gateway, binding) == []

    def test_role_fetched_once(self, store, gateway, monkeypatch):
        """Test that the Role is fetched once however many siblings share it."""
        store.add(make_role(), *(make_binding(name=f"b{i}") for i in range(5)))
        calls = []
        original_get = store.get

        def counting_get(kind, namespace, name):
            calls.append(kind)
            return original_get(kind, namespace, name)

        monkeypatch.setattr(store, "get", counting_get)
        binding = RoleBinding(original_get("RoleBinding", "default", "b0"))

        aggregate_bound_policies(store, gateway, binding)

        assert calls.count("Role") == 1

"""Tests for Prometheus metrics."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from factories import make_role
from vault_rbac_operator.handlers.role import RoleReconciler
from vault_rbac_operator.metrics import (
    api_call_duration_seconds,
    error_total,
    reconcile_duration_seconds,
    reconcile_total,
    triggers_filtered_total,
    vault_operations_total,
)
from vault_rbac_operator.utils.errors import AuthorityUnavailable


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricsExist:
    """Test that all expected metrics are defined."""

    def test_names(self):
        # Prometheus counters don't include "_total" in their _name attribute
        assert reconcile_total._name == "vault_rbac_operator_reconcile"
        assert error_total._name == "vault_rbac_operator_error"
        assert triggers_filtered_total._name == "vault_rbac_operator_triggers_filtered"
        assert vault_operations_total._name == "vault_rbac_operator_vault_operations"
        assert reconcile_duration_seconds._name == "vault_rbac_operator_reconcile_duration_seconds"
        assert api_call_duration_seconds._name == "vault_rbac_operator_api_call_duration_seconds"


class TestReconcileMetrics:
    """Test that reconciles are counted."""

    def test_synced_counted(self, store, gateway, emit):
        store.add(make_role())
        labels = {"kind": "Role", "result": "synced"}
        before = _sample("vault_rbac_operator_reconcile_total", labels)

        RoleReconciler(store, gateway, emit=emit).reconcile("default", "reader")

        assert _sample("vault_rbac_operator_reconcile_total", labels) == before + 1

    def test_error_counted(self, store, gateway, emit, vault_client):
        store.add(make_role())
        vault_client.sys.create_or_update_policy.side_effect = AuthorityUnavailable("down")
        labels = {"kind": "Role", "error_type": "AuthorityUnavailable"}
        before = _sample("vault_rbac_operator_error_total", labels)

        with pytest.raises(AuthorityUnavailable):
            RoleReconciler(store, gateway, emit=emit).reconcile("default", "reader")

        assert _sample("vault_rbac_operator_error_total", labels) == before + 1

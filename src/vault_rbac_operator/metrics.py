"""Prometheus metrics for the Vault RBAC Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "vault_rbac_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "vault_rbac_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "vault_rbac_operator_error_total",
    "Total number of reconcile errors",
    ["kind", "error_type"],
)

# Dispatch metrics
triggers_filtered_total = Counter(
    "vault_rbac_operator_triggers_filtered_total",
    "Watch triggers dropped because the namespace is out of scope",
    ["kind"],
)

# Vault operation metrics
vault_operations_total = Counter(
    "vault_rbac_operator_vault_operations_total",
    "Total number of Vault operations",
    ["operation", "result"],
)

# API call metrics
api_call_total = Counter(
    "vault_rbac_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "vault_rbac_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

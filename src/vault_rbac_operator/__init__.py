"""Vault RBAC Operator: sync Kubernetes RBAC declarations into Vault."""

__version__ = "0.1.0"

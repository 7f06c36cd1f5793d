"""Clients for the Kubernetes API and Vault."""

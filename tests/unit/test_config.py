"""Tests for configuration loading and namespace scoping."""

from __future__ import annotations

import pytest

from vault_rbac_operator.config import DEFAULT_SA_TOKEN_PATH, NamespaceScope, OperatorConfig


class TestNamespaceScope:
    """Test cases for NamespaceScope.contains."""

    def test_everything_by_default(self):
        assert NamespaceScope().contains("default")

    def test_system_namespaces_excluded(self):
        scope = NamespaceScope()
        assert not scope.contains("kube-system")
        assert not scope.contains("kube-public")
        assert not scope.contains("kube-node-lease")

    def test_system_namespaces_included(self):
        assert NamespaceScope(include_system_namespaces=True).contains("kube-system")

    def test_include_list(self):
        scope = NamespaceScope(include_namespaces=["team-a"])
        assert scope.contains("team-a")
        assert not scope.contains("team-b")

    def test_exclude_wins(self):
        """Test that an excluded namespace stays excluded even when included."""
        scope = NamespaceScope(include_namespaces=["team-a"], exclude_namespaces=["team-a"])
        assert not scope.contains("team-a")

    def test_cluster_scoped(self):
        assert not NamespaceScope().contains(None)
        assert not NamespaceScope().contains("")


class TestFromEnv:
    """Test cases for OperatorConfig.from_env."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        for var in ("AUTH_MOUNT", "USE_FINALIZERS", "WATCH_NAMESPACES", "EXCLUDE_NAMESPACES",
                    "VAULT_ADDR", "VAULT_TOKEN", "VAULT_K8S_TOKEN_PATH", "METRICS_PORT"):
            monkeypatch.delenv(var, raising=False)

        cfg = OperatorConfig.from_env()

        assert cfg.auth_mount == "kubernetes"
        assert cfg.use_finalizers is False
        assert cfg.scope.include_namespaces == []
        assert cfg.vault.address == "http://127.0.0.1:8200"
        assert cfg.vault.token is None
        assert cfg.vault.k8s_token_path == DEFAULT_SA_TOKEN_PATH
        assert cfg.metrics_port == 8080

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("AUTH_MOUNT", "k8s-prod")
        monkeypatch.setenv("USE_FINALIZERS", "true")
        monkeypatch.setenv("WATCH_NAMESPACES", "team-a, team-b,,")
        monkeypatch.setenv("EXCLUDE_NAMESPACES", "legacy")
        monkeypatch.setenv("VAULT_ADDR", "https://vault:8200")
        monkeypatch.setenv("VAULT_SKIP_VERIFY", "yes")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "5")

        cfg = OperatorConfig.from_env()

        assert cfg.auth_mount == "k8s-prod"
        assert cfg.use_finalizers is True
        assert cfg.scope.include_namespaces == ["team-a", "team-b"]
        assert cfg.scope.exclude_namespaces == ["legacy"]
        assert cfg.vault.address == "https://vault:8200"
        assert cfg.vault.skip_verify is True
        assert cfg.vault.timeout == 5.0
        assert cfg.request_timeout == 5.0

    def test_false_values(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("USE_FINALIZERS", "0")
        assert OperatorConfig.from_env().use_finalizers is False


class TestRunOptions:
    """Test cases for OperatorConfig.run_options."""

    def test_standalone_by_default(self):
        options = OperatorConfig().run_options()

        assert options["standalone"] is True
        assert options["clusterwide"] is True
        assert "peering_name" not in options

    def test_include_list_narrows_watch(self):
        cfg = OperatorConfig(scope=NamespaceScope(include_namespaces=["team-a"]))

        options = cfg.run_options()

        assert options["clusterwide"] is False
        assert options["namespaces"] == ["team-a"]

    def test_leader_election(self, monkeypatch: pytest.MonkeyPatch):
        """Test that leader election enables kopf peering."""
        monkeypatch.setenv("LEADER_ELECT", "true")
        monkeypatch.setenv("PEERING_NAME", "vault-rbac")
        monkeypatch.setenv("PEERING_PRIORITY", "42")

        options = OperatorConfig.from_env().run_options()

        assert options["standalone"] is False
        assert options["peering_name"] == "vault-rbac"
        assert options["priority"] == 42

    def test_random_priority_without_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LEADER_ELECT", "true")
        monkeypatch.delenv("PEERING_PRIORITY", raising=False)

        cfg = OperatorConfig.from_env()

        assert cfg.peering_priority >= 1

    def test_resync_and_retry_settings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RESYNC_INTERVAL_SECONDS", "60")
        monkeypatch.setenv("RETRY_DELAY_SECONDS", "5")

        cfg = OperatorConfig.from_env()

        assert cfg.resync_interval == 60.0
        assert cfg.retry_delay == 5.0

"""Shared fixtures for the unit tests."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import MagicMock

import pytest

from vault_rbac_operator.services.vault.client import VaultGateway
from vault_rbac_operator.utils.errors import ConflictError, NotFoundError


class FakeStore:
    """In-memory object store honouring resourceVersion conflicts."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.updates: list[dict[str, Any]] = []
        self._version = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    @staticmethod
    def _key(body: dict[str, Any]) -> tuple[str, str, str]:
        meta = body["metadata"]
        return body["kind"], meta["namespace"], meta["name"]

    def add(self, *bodies: dict[str, Any]) -> None:
        for body in bodies:
            stored = copy.deepcopy(body)
            stored["metadata"]["resourceVersion"] = self._next_version()
            self.objects[self._key(stored)] = stored

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.objects[(kind, namespace, name)])
        except KeyError:
            raise NotFoundError(kind, namespace, name) from None

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(body)
            for (k, ns, _), body in self.objects.items()
            if k == kind and ns == namespace
        ]

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        key = self._key(body)
        current = self.objects.get(key)
        if current is None:
            raise NotFoundError(*key)
        if current["metadata"]["resourceVersion"] != body["metadata"].get("resourceVersion"):
            raise ConflictError(f"{key} was modified")
        stored = copy.deepcopy(body)
        stored["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = stored
        self.updates.append(copy.deepcopy(stored))
        return copy.deepcopy(stored)

    def get_config_map_data(self, namespace: str, name: str) -> dict[str, str]:
        return self.get("ConfigMap", namespace, name).get("data") or {}


@pytest.fixture(autouse=True)
def no_throttle(monkeypatch: pytest.MonkeyPatch) -> None:
    """Lift the client-side rate limits so tests do not sleep."""
    monkeypatch.setattr("vault_rbac_operator.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 1e9)
    monkeypatch.setattr("vault_rbac_operator.utils.rate_limit._VAULT_RATE_LIMIT_PER_SECOND", 1e9)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def vault_client() -> MagicMock:
    return MagicMock(name="hvac.Client")


@pytest.fixture
def gateway(vault_client: MagicMock) -> VaultGateway:
    return VaultGateway(lambda: vault_client)


@pytest.fixture
def emit() -> MagicMock:
    return MagicMock(name="emit")

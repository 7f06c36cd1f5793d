"""Object store interface consumed by the reconcilers."""

from __future__ import annotations

from typing import Any, Protocol


class ObjectStore(Protocol):
    """Protocol defining the cluster object operations the operator needs."""

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Fetch one object, raising NotFoundError if it does not exist."""
        ...

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        """List every object of a kind in a namespace, in store order."""
        ...

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        """Replace an object, raising ConflictError on a stale resourceVersion."""
        ...

    def get_config_map_data(self, namespace: str, name: str) -> dict[str, str]:
        """Fetch the data of a ConfigMap, raising NotFoundError if absent."""
        ...

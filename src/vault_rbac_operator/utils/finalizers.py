"""Finalizer-governed two-phase deletion.

Phase one adds the marker while the object is live. Phase two runs the
external cleanup only while the marker is still present, then strips it so
the API server can finish removing the object.
"""

from __future__ import annotations

import copy
import enum
from typing import Any, Protocol

from ..constants import FINALIZER
from ..resources import KubeObject


class Updater(Protocol):
    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        ...


class FinalizerState(enum.Enum):
    """Lifecycle derived from (deletion requested, marker present)."""

    UNMANAGED = "unmanaged"  # live, no marker
    HELD = "held"  # live, marker present
    CLEANUP_PENDING = "cleanup-pending"  # deleting, marker present
    RELEASED = "released"  # deleting, marker absent

    @classmethod
    def of(cls, obj: KubeObject) -> FinalizerState:
        marked = has_finalizer(obj)
        if obj.deletion_requested:
            return cls.CLEANUP_PENDING if marked else cls.RELEASED
        return cls.HELD if marked else cls.UNMANAGED


def has_finalizer(obj: KubeObject) -> bool:
    return FINALIZER in obj.finalizers


def _with_finalizers(body: dict[str, Any], finalizers: list[str]) -> dict[str, Any]:
    updated = copy.deepcopy(body)
    updated.setdefault("metadata", {})["finalizers"] = finalizers
    return updated


def add_finalizer(store: Updater, obj: KubeObject) -> dict[str, Any] | None:
    """Persist the marker on a copy of the object.

    The copy keeps the fetched resourceVersion, so a concurrent change makes
    the update fail with ConflictError instead of overwriting it.

    Returns:
        The updated body, or None if the marker was already present
    """
    if has_finalizer(obj):
        return None
    return store.update(_with_finalizers(obj.body, obj.finalizers + [FINALIZER]))


def remove_finalizer(store: Updater, obj: KubeObject) -> dict[str, Any] | None:
    """Strip the marker and persist, releasing the object for deletion.

    Returns:
        The updated body, or None if there was no marker to remove
    """
    if not has_finalizer(obj):
        return None
    remaining = [f for f in obj.finalizers if f != FINALIZER]
    return store.update(_with_finalizers(obj.body, remaining))

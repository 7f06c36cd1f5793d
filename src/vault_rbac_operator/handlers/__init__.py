"""Reconcilers for the watched Kubernetes kinds."""

from .base import BaseReconciler, ReconcileState
from .dispatch import Dispatcher
from .role import RoleReconciler
from .rolebinding import RoleBindingReconciler
from .serviceaccount import ServiceAccountReconciler

__all__ = [
    "BaseReconciler",
    "Dispatcher",
    "ReconcileState",
    "RoleBindingReconciler",
    "RoleReconciler",
    "ServiceAccountReconciler",
]

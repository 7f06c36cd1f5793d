"""Thin views over raw Kubernetes object bodies.

Bodies are the plain camelCase dicts returned by the object store (the same
shape kopf hands to handlers). The views never copy or mutate the body; they
only expose the fields the reconcilers read.
"""

from __future__ import annotations

from typing import Any

from .constants import (
    ANNOTATION_BIND,
    ANNOTATION_CONFIGMAP_POLICY,
    ANNOTATION_IGNORE,
    ANNOTATION_INLINE_POLICY,
    KIND_ROLE,
    KIND_ROLE_BINDING,
    KIND_SERVICE_ACCOUNT,
)
from .utils.errors import UnknownObjectKind


class KubeObject:
    """Common accessors for a namespaced object."""

    kind = ""

    def __init__(self, body: dict[str, Any]) -> None:
        self.body = body

    @property
    def metadata(self) -> dict[str, Any]:
        return self.body.get("metadata") or {}

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace", "")

    @property
    def uid(self) -> str:
        return self.metadata.get("uid", "unknown")

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.get("annotations") or {}

    @property
    def finalizers(self) -> list[str]:
        return list(self.metadata.get("finalizers") or [])

    @property
    def deletion_requested(self) -> bool:
        return self.metadata.get("deletionTimestamp") is not None

    def has_annotation(self, key: str) -> bool:
        return key in self.annotations

    def is_ignored(self) -> bool:
        """Whether the operator should leave this object alone."""
        return self.has_annotation(ANNOTATION_IGNORE)

    def subject_names(self) -> list[str]:
        """Service account names an auth role built from this object binds to."""
        raise UnknownObjectKind(f"{self.kind or type(self).__name__} has no bindable subjects")

    def __repr__(self) -> str:
        return f"<{self.kind} {self.namespace}/{self.name}>"


class Role(KubeObject):
    kind = KIND_ROLE

    @property
    def rules(self) -> list[dict[str, Any]]:
        return self.body.get("rules") or []


class RoleBinding(KubeObject):
    kind = KIND_ROLE_BINDING

    @property
    def role_ref(self) -> dict[str, Any]:
        return self.body.get("roleRef") or {}

    @property
    def role_name(self) -> str:
        return self.role_ref.get("name", "")

    @property
    def references_role(self) -> bool:
        """Only namespaced Roles are resolved; ClusterRole refs are out of scope."""
        return self.role_ref.get("kind", KIND_ROLE) == KIND_ROLE

    @property
    def subjects(self) -> list[dict[str, Any]]:
        return self.body.get("subjects") or []

    def is_ignored(self) -> bool:
        return self.has_annotation(ANNOTATION_IGNORE) or not self.has_annotation(ANNOTATION_BIND)

    def is_active(self) -> bool:
        """Opted in, not ignored and not being deleted."""
        return not self.is_ignored() and not self.deletion_requested

    def subject_names(self) -> list[str]:
        return [s["name"] for s in self.subjects if s.get("kind") == KIND_SERVICE_ACCOUNT and s.get("name")]


class ServiceAccount(KubeObject):
    kind = KIND_SERVICE_ACCOUNT

    def is_ignored(self) -> bool:
        return self.has_annotation(ANNOTATION_IGNORE) or not self.has_annotation(ANNOTATION_BIND)

    def has_acl_source(self) -> bool:
        return self.has_annotation(ANNOTATION_INLINE_POLICY) or self.has_annotation(ANNOTATION_CONFIGMAP_POLICY)

    def subject_names(self) -> list[str]:
        return [self.name]


_VIEWS: dict[str, type[KubeObject]] = {
    KIND_ROLE: Role,
    KIND_ROLE_BINDING: RoleBinding,
    KIND_SERVICE_ACCOUNT: ServiceAccount,
}


def wrap(kind: str, body: dict[str, Any]) -> KubeObject:
    """Wrap a raw body in the view for its kind.

    Raises:
        UnknownObjectKind: If the kind is not managed by the operator
    """
    try:
        view = _VIEWS[kind]
    except KeyError:
        raise UnknownObjectKind(f"unsupported object kind {kind!r}") from None
    return view(body)

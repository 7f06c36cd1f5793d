"""Builder for Vault Kubernetes auth role parameters."""

from __future__ import annotations

from typing import Any

from ..constants import (
    ANNOTATION_ROLE_CONFIGMAP,
    PARAM_BOUND_NAMES,
    PARAM_BOUND_NAMESPACES,
    PARAM_POLICIES,
    ROLE_CONFIG_ANNOTATIONS,
)
from ..resources import KubeObject
from ..utils.errors import ConfigDocumentNotFound, NotFoundError
from .policy import ConfigMapLookup


def normalize_parameter_name(key: str) -> str:
    return key.replace("-", "_")


def resolve_auth_parameters(
    obj: KubeObject,
    subject_names: list[str],
    policy_names: list[str],
    lookup: ConfigMapLookup,
) -> dict[str, Any]:
    """Build the parameters of the auth role bound to an object.

    Layers, later ones overriding earlier ones:
    1. bound service account names, the object's namespace and the policies
    2. every key of the ConfigMap named by the configmap annotation
    3. the recognised token tuning annotations on the object

    Args:
        obj: RoleBinding or ServiceAccount the role is built for
        subject_names: Service account names to bind
        policy_names: Vault policies to attach
        lookup: Fetches ConfigMap data by (namespace, name)

    Returns:
        Parameter map for auth/<mount>/role/<name>

    Raises:
        ConfigDocumentNotFound: If the referenced ConfigMap cannot be fetched
    """
    params: dict[str, Any] = {
        PARAM_BOUND_NAMES: list(subject_names),
        PARAM_BOUND_NAMESPACES: [obj.namespace],
        PARAM_POLICIES: list(policy_names),
    }
    annotations = obj.annotations

    cm_name = annotations.get(ANNOTATION_ROLE_CONFIGMAP)
    if cm_name is not None:
        try:
            data = lookup(obj.namespace, cm_name)
        except NotFoundError as e:
            raise ConfigDocumentNotFound(f"role configmap {obj.namespace}/{cm_name} not found") from e
        for key, value in data.items():
            params[normalize_parameter_name(key)] = value

    for annotation, param in ROLE_CONFIG_ANNOTATIONS.items():
        if annotation in annotations:
            params[param] = annotations[annotation]

    return params

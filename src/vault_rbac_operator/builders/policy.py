"""Builders for Vault policy documents."""

from __future__ import annotations

import json
from typing import Any, Callable

from ..constants import ANNOTATION_CONFIGMAP_POLICY, ANNOTATION_INLINE_POLICY, POLICY_CONFIGMAP_KEY, VAULT_API_GROUP
from ..resources import KubeObject
from ..utils.errors import ConfigDocumentNotFound, MissingPolicyKey, NotFoundError

ConfigMapLookup = Callable[[str, str], dict[str, str]]


def filter_access_rules(rules: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the rules whose first apiGroup is the Vault group, in order."""
    return [rule for rule in rules if (rule.get("apiGroups") or [None])[0] == VAULT_API_GROUP]


def has_access_rules(rules: list[dict[str, Any]]) -> bool:
    return bool(filter_access_rules(rules))


def render_policy_document(rules: list[dict[str, Any]]) -> dict[str, Any]:
    """Render rules into a Vault JSON policy document.

    Each listed resource becomes a path granting the rule's verbs as
    capabilities. When a resource appears in several rules the last one wins.

    Args:
        rules: Role rules, normally already passed through filter_access_rules

    Returns:
        {"path": {<resource>: {"capabilities": [verbs...]}}} with sorted paths
    """
    paths: dict[str, dict[str, list[str]]] = {}
    for rule in rules:
        verbs = list(rule.get("verbs") or [])
        for resource in rule.get("resources") or []:
            paths[resource] = {"capabilities": verbs}
    return {"path": {resource: paths[resource] for resource in sorted(paths)}}


def dump_policy_document(document: dict[str, Any]) -> str:
    """Serialize a policy document; identical documents give identical text."""
    return json.dumps(document, indent=2, sort_keys=True)


def policy_document_json(rules: list[dict[str, Any]]) -> str:
    """Filter, render and serialize a role's rules in one step."""
    return dump_policy_document(render_policy_document(filter_access_rules(rules)))


def resolve_identity_policy(obj: KubeObject, lookup: ConfigMapLookup) -> str:
    """Resolve the policy text declared on a service account.

    The inline-policy annotation is returned verbatim. Otherwise the
    configmap-policy annotation names a ConfigMap in the same namespace whose
    policy.hcl key holds the policy.

    Raises:
        ConfigDocumentNotFound: If the referenced ConfigMap cannot be fetched
        MissingPolicyKey: If the ConfigMap has no policy.hcl key
    """
    annotations = obj.annotations
    if ANNOTATION_INLINE_POLICY in annotations:
        return annotations[ANNOTATION_INLINE_POLICY]

    cm_name = annotations.get(ANNOTATION_CONFIGMAP_POLICY, "")
    try:
        data = lookup(obj.namespace, cm_name)
    except NotFoundError as e:
        raise ConfigDocumentNotFound(f"policy configmap {obj.namespace}/{cm_name} not found") from e

    if POLICY_CONFIGMAP_KEY not in data:
        raise MissingPolicyKey(f"configmap {obj.namespace}/{cm_name} does not have a {POLICY_CONFIGMAP_KEY} key")
    return data[POLICY_CONFIGMAP_KEY]

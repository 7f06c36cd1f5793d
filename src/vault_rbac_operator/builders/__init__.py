"""Builders that turn cluster objects into Vault documents."""

from .auth_role import resolve_auth_parameters
from .policy import (
    dump_policy_document,
    filter_access_rules,
    has_access_rules,
    policy_document_json,
    render_policy_document,
    resolve_identity_policy,
)

__all__ = [
    "dump_policy_document",
    "filter_access_rules",
    "has_access_rules",
    "policy_document_json",
    "render_policy_document",
    "resolve_auth_parameters",
    "resolve_identity_policy",
]

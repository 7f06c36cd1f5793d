"""Utility functions for the Vault RBAC Operator."""

from .context import get_context_dict, get_correlation_id, with_correlation_id
from .errors import sanitize_error_message, sanitize_exception
from .events import emit_event
from .rate_limit import rate_limit_k8s, rate_limit_vault

__all__ = [
    "emit_event",
    "get_context_dict",
    "get_correlation_id",
    "rate_limit_k8s",
    "rate_limit_vault",
    "sanitize_error_message",
    "sanitize_exception",
    "with_correlation_id",
]

"""Operator exceptions and error sanitization utilities."""

from __future__ import annotations

import re


class OperatorError(Exception):
    """Base class for errors raised by the operator."""


class NotFoundError(OperatorError):
    """The requested object does not exist in the cluster."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        super().__init__(f"{kind} {namespace}/{name} not found")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class ConflictError(OperatorError):
    """An update lost an optimistic-concurrency race.

    The object changed between read and write. The next watch trigger for the
    object reconciles it again, so callers do not retry in place.
    """


class AuthorityUnavailable(OperatorError):
    """Vault could not be reached or a client could not be constructed."""


class AuthorityRejected(OperatorError):
    """Vault refused a request (validation or permission failure)."""


class ConfigurationMissing(OperatorError):
    """A referenced object or key needed to build desired state is absent."""


class ConfigDocumentNotFound(ConfigurationMissing):
    """A referenced ConfigMap could not be fetched."""


class MissingPolicyKey(ConfigurationMissing):
    """A referenced ConfigMap has no policy key."""


class UnknownObjectKind(OperatorError):
    """An object of a kind the operator does not manage reached a reconciler."""


class ReconcileCancelled(OperatorError):
    """The operator is shutting down and the reconcile was abandoned."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"\b(hvs|hvb|hvr|s|b|r)\.[A-Za-z0-9_\-]{20,}",
    r"x-vault-token[:\s]+([A-Za-z0-9_\-\.]+)",
    r"eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "token",
    "jwt",
    "password",
    "secret",
    "client_token",
    "accessor",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with tokens and credentials redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    # Replace "field: value" and "field=value" pairs
    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"\b{field}\b\s*[:=]\s*([^\s,;\)]+)",
            f"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))

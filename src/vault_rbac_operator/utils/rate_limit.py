"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_VAULT_RATE_LIMIT_PER_SECOND = float(os.getenv("VAULT_RATE_LIMIT_PER_SECOND", "5.0"))

# Track last call times
_k8s_last_call_time: float = 0.0
_vault_last_call_time: float = 0.0

# Handlers run on kopf's thread pool, so the shared timestamps need a lock
_k8s_lock = threading.Lock()
_vault_lock = threading.Lock()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Enforces a minimum interval between calls so that a burst of triggers
    does not overwhelm the API server.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        with _k8s_lock:
            current_time = time.time()
            min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND

            time_since_last_call = current_time - _k8s_last_call_time
            if time_since_last_call < min_interval:
                time.sleep(min_interval - time_since_last_call)

            _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def rate_limit_vault(func: _F) -> _F:
    """Decorator to rate limit Vault API calls."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _vault_last_call_time
        with _vault_lock:
            current_time = time.time()
            min_interval = 1.0 / _VAULT_RATE_LIMIT_PER_SECOND

            time_since_last_call = current_time - _vault_last_call_time
            if time_since_last_call < min_interval:
                time.sleep(min_interval - time_since_last_call)

            _vault_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore

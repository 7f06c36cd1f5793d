from .base import ObjectStore
from .client import KubernetesStore, load_kube_config

__all__ = ["KubernetesStore", "ObjectStore", "load_kube_config"]

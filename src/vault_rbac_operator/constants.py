"""Constants for the Vault RBAC Operator."""

# Annotation prefix, also the reserved API group for Vault rules in Roles
VAULT_API_GROUP = "vault.hashicorp.com"

# Resource Kinds
KIND_ROLE = "Role"
KIND_ROLE_BINDING = "RoleBinding"
KIND_SERVICE_ACCOUNT = "ServiceAccount"
KIND_CONFIG_MAP = "ConfigMap"

RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"
CORE_API_VERSION = "v1"

# Common Annotations
ANNOTATION_BIND = f"{VAULT_API_GROUP}/bind"
ANNOTATION_IGNORE = f"{VAULT_API_GROUP}/ignore"
ANNOTATION_ROLE_NAME = f"{VAULT_API_GROUP}/role-name"
ANNOTATION_POLICY_NAME = f"{VAULT_API_GROUP}/policy-name"
ANNOTATION_ROLE_CONFIGMAP = f"{VAULT_API_GROUP}/configmap"

# ServiceAccount Annotations
ANNOTATION_INLINE_POLICY = f"{VAULT_API_GROUP}/inline-policy"
ANNOTATION_CONFIGMAP_POLICY = f"{VAULT_API_GROUP}/configmap-policy"

# Auth role tuning annotations and the Vault parameter each one sets
# https://developer.hashicorp.com/vault/api-docs/auth/kubernetes#create-role
ROLE_CONFIG_ANNOTATIONS = {
    f"{VAULT_API_GROUP}/audience": "audience",
    f"{VAULT_API_GROUP}/alias-name-source": "alias_name_source",
    f"{VAULT_API_GROUP}/token-ttl": "token_ttl",
    f"{VAULT_API_GROUP}/token-max-ttl": "token_max_ttl",
    f"{VAULT_API_GROUP}/token-bound-cidrs": "token_bound_cidrs",
    f"{VAULT_API_GROUP}/token-explicit-max-ttl": "token_explicit_max_ttl",
    f"{VAULT_API_GROUP}/token-no-default-policy": "token_no_default_policy",
    f"{VAULT_API_GROUP}/token-num-uses": "token_num_uses",
    f"{VAULT_API_GROUP}/token-period": "token_period",
    f"{VAULT_API_GROUP}/token-type": "token_type",
}

# ConfigMap key holding a raw Vault policy
POLICY_CONFIGMAP_KEY = "policy.hcl"

# Auth role parameters
PARAM_BOUND_NAMES = "bound_service_account_names"
PARAM_BOUND_NAMESPACES = "bound_service_account_namespaces"
PARAM_POLICIES = "policies"

# Finalizers
FINALIZER = "vault-rbac-controller/finalizer"

# Controller name used in logs and events
CONTROLLER_NAME = "vault-rbac-operator"

# Prefix of the annotations kopf keeps its handler progress in
CONTROLLER_ANNOTATION_PREFIX = "vault-rbac-operator.vault.hashicorp.com"

# Namespaces skipped unless system namespaces are included
SYSTEM_NAMESPACES = frozenset({"kube-system", "kube-public", "kube-node-lease"})

# Event Reasons
EVENT_REASON_IGNORED = "Ignored"
EVENT_REASON_SYNCED = "Synced"
EVENT_REASON_ERROR = "Error"

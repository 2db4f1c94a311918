"""Tokens, field names and defaults shared across the provider."""

from typing import Final, FrozenSet

PROVIDER_NAME: Final[str] = "linkerd-link"
RESOURCE_TYPE: Final[str] = "linkerd-link:index:Link"

# First argv entry that turns this process into a thin wrapper around the
# manifest generator instead of the lifecycle engine.
INTERNAL_INVOKE_FLAG: Final[str] = "--internal-only-invoke-linkerd-cli"

FROM_CLUSTER_KUBECONFIG: Final[str] = "from_cluster_kubeconfig"
FROM_CLUSTER_NAME: Final[str] = "from_cluster_name"
TO_CLUSTER_KUBECONFIG: Final[str] = "to_cluster_kubeconfig"
CONTROL_PLANE_IMAGE_VERSION: Final[str] = "control_plane_image_version"
CONFIG_GROUP_YAML: Final[str] = "config_group_yaml"

CREDENTIAL_FIELDS: Final[tuple] = (FROM_CLUSTER_KUBECONFIG, TO_CLUSTER_KUBECONFIG)
OUTPUT_ONLY_FIELDS: Final[FrozenSet[str]] = frozenset({CONFIG_GROUP_YAML})

# Create has no natural identifier; existence is tracked by the engine's URN.
PLACEHOLDER_ID: Final[str] = "ignored"

DEFAULT_GENERATOR_COMMAND: Final[tuple] = ("linkerd", "multicluster")
DEFAULT_APPLIER_COMMAND: Final[tuple] = ("kubectl",)

__all__ = [
    "CONFIG_GROUP_YAML",
    "CONTROL_PLANE_IMAGE_VERSION",
    "CREDENTIAL_FIELDS",
    "DEFAULT_APPLIER_COMMAND",
    "DEFAULT_GENERATOR_COMMAND",
    "FROM_CLUSTER_KUBECONFIG",
    "FROM_CLUSTER_NAME",
    "INTERNAL_INVOKE_FLAG",
    "OUTPUT_ONLY_FIELDS",
    "PLACEHOLDER_ID",
    "PROVIDER_NAME",
    "RESOURCE_TYPE",
    "TO_CLUSTER_KUBECONFIG",
]

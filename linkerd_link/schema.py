"""Package schema returned by GetSchema. Data only; SDK generation is done elsewhere."""

import json
from typing import Any, Dict

from .constants import (
    CONFIG_GROUP_YAML,
    CONTROL_PLANE_IMAGE_VERSION,
    FROM_CLUSTER_KUBECONFIG,
    FROM_CLUSTER_NAME,
    PROVIDER_NAME,
    RESOURCE_TYPE,
    TO_CLUSTER_KUBECONFIG,
)

_KUBECONFIG_FROM = (
    "Kubernetes configuration (structural) that provides access credentials "
    "to the cluster whose services should be mirrored."
)
_KUBECONFIG_TO = (
    "Kubernetes configuration (structural) that provides access credentials "
    "to the cluster into which the services should be mirrored."
)
_CLUSTER_NAME = "Name of the cluster whose services should be mirrored."
_VERSION = "Version tag of the link control plane components."
_CONFIG_GROUP = (
    "YAML that was applied to the destination cluster. Recorded so that the "
    "link can be removed again."
)


def _input_properties() -> Dict[str, Any]:
    return {
        FROM_CLUSTER_KUBECONFIG: {"type": "string", "description": _KUBECONFIG_FROM},
        FROM_CLUSTER_NAME: {"type": "string", "description": _CLUSTER_NAME},
        TO_CLUSTER_KUBECONFIG: {"type": "string", "description": _KUBECONFIG_TO},
        CONTROL_PLANE_IMAGE_VERSION: {"type": "string", "description": _VERSION},
    }


def package_schema(version: str) -> Dict[str, Any]:
    properties = _input_properties()
    properties[FROM_CLUSTER_KUBECONFIG] = dict(properties[FROM_CLUSTER_KUBECONFIG], secret=True)
    properties[TO_CLUSTER_KUBECONFIG] = dict(properties[TO_CLUSTER_KUBECONFIG], secret=True)
    properties[CONFIG_GROUP_YAML] = {
        "type": "string",
        "description": _CONFIG_GROUP,
        "secret": True,
    }
    return {
        "name": PROVIDER_NAME,
        "version": version,
        "description": "A package for linking k8s clusters with linkerd.",
        "license": "Apache-2.0",
        "provider": {},
        "resources": {
            RESOURCE_TYPE: {
                "description": "Links the services from one cluster into another cluster.",
                "properties": properties,
                "required": [FROM_CLUSTER_KUBECONFIG, FROM_CLUSTER_NAME, CONFIG_GROUP_YAML],
                "inputProperties": _input_properties(),
                "requiredInputs": [
                    FROM_CLUSTER_KUBECONFIG,
                    FROM_CLUSTER_NAME,
                    TO_CLUSTER_KUBECONFIG,
                ],
            }
        },
        "types": {},
        "language": {"python": {}},
    }


def package_schema_json(version: str) -> str:
    return json.dumps(package_schema(version), indent=2, sort_keys=True)

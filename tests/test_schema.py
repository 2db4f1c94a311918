"""Tests for the package schema."""

import json

from linkerd_link.constants import RESOURCE_TYPE
from linkerd_link.schema import package_schema, package_schema_json


class TestPackageSchema:
    def test_required_inputs(self):
        resource = package_schema("1.2.3")["resources"][RESOURCE_TYPE]

        assert resource["requiredInputs"] == [
            "from_cluster_kubeconfig",
            "from_cluster_name",
            "to_cluster_kubeconfig",
        ]
        assert set(resource["required"]) == {
            "from_cluster_kubeconfig",
            "from_cluster_name",
            "config_group_yaml",
        }

    def test_secret_properties(self):
        """Both credentials and the recorded manifest are marked secret."""
        properties = package_schema("1.2.3")["resources"][RESOURCE_TYPE]["properties"]

        secret = {name for name, prop in properties.items() if prop.get("secret")}
        assert secret == {
            "from_cluster_kubeconfig",
            "to_cluster_kubeconfig",
            "config_group_yaml",
        }
        assert len(properties) == 5

    def test_json_form(self):
        schema = json.loads(package_schema_json("1.2.3"))

        assert schema["name"] == "linkerd-link"
        assert schema["version"] == "1.2.3"

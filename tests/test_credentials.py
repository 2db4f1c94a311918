"""Tests for kubeconfig normalization and scoped credential files."""

import os
import stat

import pytest

from linkerd_link.credentials import (
    kubeconfig_file,
    normalize_kubeconfig,
    normalize_optional_kubeconfig,
)
from linkerd_link.exceptions import (
    InvalidCredentialFormatError,
    NormalizationError,
    ValidationError,
)

KUBECONFIG = {
    "apiVersion": "v1",
    "clusters": [{"name": "east", "cluster": {"server": "https://east:6443"}}],
    "current-context": "east",
}


class TestNormalizeKubeconfig:
    """Tests for normalize_kubeconfig."""

    def test_structure_and_string_are_equivalent(self):
        """A structure and its JSON serialization normalize to the same bytes."""
        as_string = (
            '{ "current-context": "east",\n'
            '  "clusters": [{"name": "east", "cluster": {"server": "https://east:6443"}}],\n'
            '  "apiVersion": "v1" }'
        )

        assert normalize_kubeconfig(KUBECONFIG, "f") == normalize_kubeconfig(as_string, "f")

    def test_yaml_string(self):
        as_yaml = (
            "apiVersion: v1\n"
            "clusters:\n"
            "- name: east\n"
            "  cluster:\n"
            "    server: https://east:6443\n"
            "current-context: east\n"
        )

        assert normalize_kubeconfig(as_yaml, "f") == normalize_kubeconfig(KUBECONFIG, "f")

    def test_canonical_form(self):
        """Keys are sorted and no insignificant whitespace is kept."""
        assert normalize_kubeconfig({"b": 1, "a": {"d": 2, "c": 3}}, "f") == (
            b'{"a":{"c":3,"d":2},"b":1}'
        )

    def test_non_ascii_is_kept_as_utf8(self):
        assert normalize_kubeconfig({"user": "josé"}, "f") == '{"user":"josé"}'.encode(
            "utf-8"
        )

    @pytest.mark.parametrize("value", [42, 4.2, True, ["a"], None])
    def test_rejects_other_types(self, value):
        with pytest.raises(InvalidCredentialFormatError) as exc_info:
            normalize_kubeconfig(value, "to_cluster_kubeconfig")

        err = exc_info.value
        assert isinstance(err, ValidationError)
        assert err.field == "to_cluster_kubeconfig"
        assert err.observed_type == type(value).__name__
        assert f"got: {type(value).__name__}" in err.message

    def test_unparseable_string(self):
        with pytest.raises(NormalizationError) as exc_info:
            normalize_kubeconfig("clusters: [unclosed", "from_cluster_kubeconfig")

        assert exc_info.value.field == "from_cluster_kubeconfig"

    def test_string_that_is_not_an_object(self):
        """A scalar or list is not a kubeconfig even if it parses."""
        with pytest.raises(NormalizationError, match="must hold a kubeconfig object"):
            normalize_kubeconfig("[1, 2]", "f")

    def test_optional_absent(self):
        assert normalize_optional_kubeconfig(None, "f") is None
        assert normalize_optional_kubeconfig({"a": 1}, "f") == b'{"a":1}'


class TestKubeconfigFile:
    """Tests for the kubeconfig_file context manager."""

    def test_writes_contents_privately(self):
        with kubeconfig_file(b'{"a":1}') as path:
            assert path.read_bytes() == b'{"a":1}'
            assert path.name.startswith("kubeconfig")
            assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_removed_after_block(self):
        with kubeconfig_file(b"{}") as path:
            assert path.exists()

        assert not path.exists()

    def test_removed_when_block_raises(self):
        with pytest.raises(RuntimeError):
            with kubeconfig_file(b"{}") as path:
                raise RuntimeError("boom")

        assert not path.exists()

    def test_already_removed_file_is_not_an_error(self):
        with kubeconfig_file(b"{}") as path:
            os.remove(path)

        assert not path.exists()

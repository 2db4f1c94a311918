"""Tests for wire property map decoding and encoding."""

import pytest

from linkerd_link.exceptions import TransportError
from linkerd_link.properties import (
    UNKNOWN,
    is_rpc_secret,
    marshal_properties,
    resource_type,
    unmarshal_properties,
    unwrap_rpc_secret,
    wrap_rpc_secret,
)


class TestSecrets:
    """Tests for the secret envelope helpers."""

    def test_wrap_and_detect(self):
        wrapped = wrap_rpc_secret("token")

        assert is_rpc_secret(wrapped)
        assert unwrap_rpc_secret(wrapped) == "token"

    def test_wrap_is_idempotent(self):
        wrapped = wrap_rpc_secret("token")
        assert wrap_rpc_secret(wrapped) is wrapped

    def test_plain_values_pass_through(self):
        assert not is_rpc_secret({"value": "token"})
        assert unwrap_rpc_secret("token") == "token"


class TestUnmarshalProperties:
    """Tests for unmarshal_properties."""

    def test_top_level_secret(self):
        props, secret_keys = unmarshal_properties(
            {"a": wrap_rpc_secret("x"), "b": "y"}
        )

        assert props == {"a": "x", "b": "y"}
        assert secret_keys == {"a"}

    def test_nested_secret_marks_top_level_key(self):
        props, secret_keys = unmarshal_properties(
            {"kubeconfig": {"users": [{"token": wrap_rpc_secret("t")}]}}
        )

        assert props == {"kubeconfig": {"users": [{"token": "t"}]}}
        assert secret_keys == {"kubeconfig"}

    def test_unknowns(self):
        props, _ = unmarshal_properties({"a": UNKNOWN})
        assert props == {"a": UNKNOWN}

        props, _ = unmarshal_properties({"a": UNKNOWN}, keep_unknowns=False)
        assert props == {}

    def test_nulls_are_dropped(self):
        props, _ = unmarshal_properties({"a": None, "b": 1})
        assert props == {"b": 1}

        props, _ = unmarshal_properties({"a": None}, skip_nulls=False)
        assert props == {"a": None}

    def test_none_map(self):
        assert unmarshal_properties(None) == ({}, set())

    def test_unrecognized_signature(self):
        with pytest.raises(TransportError, match="Unrecognized signature"):
            unmarshal_properties(
                {"a": {"4dabf18193072939515e22adb298388d": "not-a-secret"}}
            )

    def test_non_mapping(self):
        with pytest.raises(TransportError):
            unmarshal_properties(["a"])


class TestMarshalProperties:
    def test_wraps_secret_keys_and_drops_none(self):
        out = marshal_properties({"a": "x", "b": "y", "c": None}, {"a"})

        assert out == {"a": wrap_rpc_secret("x"), "b": "y"}


class TestResourceType:
    """Tests for resource_type."""

    def test_plain_type(self):
        urn = "urn:pulumi:dev::infra::linkerd-link:index:Link::east-into-west"
        assert resource_type(urn) == "linkerd-link:index:Link"

    def test_parented_type(self):
        urn = "urn:pulumi:dev::infra::my:index:Mesh$linkerd-link:index:Link::east"
        assert resource_type(urn) == "linkerd-link:index:Link"

    def test_name_may_contain_separators(self):
        urn = "urn:pulumi:dev::infra::linkerd-link:index:Link::a::b"
        assert resource_type(urn) == "linkerd-link:index:Link"

    @pytest.mark.parametrize(
        "urn", ["", "not-a-urn", "urn:pulumi:dev::infra", "urn:other:dev::p::t::n"]
    )
    def test_malformed(self, urn):
        with pytest.raises(TransportError, match="Malformed URN"):
            resource_type(urn)

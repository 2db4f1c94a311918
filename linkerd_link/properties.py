"""
Support for decoding and encoding the property maps that flow through the
resource RPC verbs.

Property maps arrive as JSON objects. Secret values are wrapped in the
engine's signature envelope and values not yet known during a preview are
sent as a sentinel string; everything else is plain JSON.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple

from .exceptions import TransportError

UNKNOWN = "04da6b54-80e4-46f7-96ec-b56ff0331ba9"
"""Sentinel the engine sends for values that will only be computed later."""

_special_sig_key = "4dabf18193072939515e22adb298388d"
_special_secret_sig = "1b47061264138c4ac30d75fd1eb44270"

PropertyMap = Dict[str, Any]


def is_rpc_secret(value: Any) -> bool:
    """Returns if a given value is a wrapped secret."""
    return (
        isinstance(value, dict)
        and _special_sig_key in value
        and value[_special_sig_key] == _special_secret_sig
    )


def wrap_rpc_secret(value: Any) -> Any:
    """Wrap a value as a secret unless it already is one."""
    if is_rpc_secret(value):
        return value

    return {
        _special_sig_key: _special_secret_sig,
        "value": value,
    }


def unwrap_rpc_secret(value: Any) -> Any:
    """Return the underlying value of a wrapped secret, or the value unmodified."""
    if is_rpc_secret(value):
        return value["value"]

    return value


def is_unknown(value: Any) -> bool:
    return isinstance(value, str) and value == UNKNOWN


def _unmarshal_value(value: Any, keep_unknowns: bool) -> Tuple[Any, bool]:
    """Decode one value, returning it with a flag telling whether it held a secret."""
    if is_unknown(value):
        return (UNKNOWN if keep_unknowns else None), False

    if is_rpc_secret(value):
        if "value" not in value:
            raise TransportError("Secret envelope without a value")
        inner, _ = _unmarshal_value(value["value"], keep_unknowns)
        return inner, True

    if isinstance(value, dict):
        if _special_sig_key in value:
            raise TransportError(
                "Unrecognized signature when unmarshalling resource property",
                context={"signature": value[_special_sig_key]},
            )
        out = {}
        secret = False
        for k, v in value.items():
            decoded, nested_secret = _unmarshal_value(v, keep_unknowns)
            secret = secret or nested_secret
            # Values that decode to None are treated as absent.
            if decoded is not None:
                out[k] = decoded
        return out, secret

    if isinstance(value, list):
        items = []
        secret = False
        for v in value:
            decoded, nested_secret = _unmarshal_value(v, keep_unknowns)
            secret = secret or nested_secret
            items.append(decoded)
        return items, secret

    if value is None or isinstance(value, (str, bool, int, float)):
        return value, False

    raise TransportError(
        f"Unsupported property value of type {type(value).__name__}"
    )


def unmarshal_properties(
    raw: Optional[Mapping[str, Any]],
    keep_unknowns: bool = True,
    skip_nulls: bool = True,
) -> Tuple[PropertyMap, Set[str]]:
    """
    Decode a wire property map.

    Secretness of nested values is pushed up to the top-level key, since
    secrets can only be tracked per top-level property.

    Returns:
        The plain property map and the set of top-level keys that were secret.

    Raises:
        TransportError: If the map is malformed.
    """
    if raw is None:
        return {}, set()
    if not isinstance(raw, Mapping):
        raise TransportError(
            f"Property map must be an object, got {type(raw).__name__}"
        )

    props: PropertyMap = {}
    secret_keys: Set[str] = set()
    for key, value in raw.items():
        if not isinstance(key, str):
            raise TransportError(f"Property key must be a string, got {key!r}")
        decoded, secret = _unmarshal_value(value, keep_unknowns)
        if decoded is None and skip_nulls:
            continue
        props[key] = decoded
        if secret:
            secret_keys.add(key)
    return props, secret_keys


def marshal_properties(
    props: Mapping[str, Any], secret_keys: Iterable[str] = ()
) -> Dict[str, Any]:
    """Encode a property map for the wire, wrapping ``secret_keys`` as secrets."""
    secrets = set(secret_keys)
    out: Dict[str, Any] = {}
    for key, value in props.items():
        if value is None:
            continue
        out[key] = wrap_rpc_secret(value) if key in secrets else value
    return out


def resource_type(urn: str) -> str:
    """
    Extract the resource type token from a URN.

    URNs look like ``urn:pulumi:<stack>::<project>::<qualified type>::<name>``
    where the qualified type may be prefixed by parent types joined with ``$``.

    Raises:
        TransportError: If the URN is malformed.
    """
    if not isinstance(urn, str) or not urn.startswith("urn:pulumi:"):
        raise TransportError(f"Malformed URN '{urn}'")
    parts = urn.split("::")
    if len(parts) < 4:
        raise TransportError(f"Malformed URN '{urn}'")
    qualified_type = parts[2]
    return qualified_type.split("$")[-1]


__all__ = [
    "PropertyMap",
    "UNKNOWN",
    "is_rpc_secret",
    "is_unknown",
    "marshal_properties",
    "resource_type",
    "unmarshal_properties",
    "unwrap_rpc_secret",
    "wrap_rpc_secret",
]

"""The Link resource: decoding declared and recorded property maps.

Inputs are validated and their credentials normalized here, before any
external process is started, so an invalid resource fails fast.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from .constants import (
    CONFIG_GROUP_YAML,
    CONTROL_PLANE_IMAGE_VERSION,
    CREDENTIAL_FIELDS,
    FROM_CLUSTER_KUBECONFIG,
    FROM_CLUSTER_NAME,
    TO_CLUSTER_KUBECONFIG,
)
from .credentials import normalize_kubeconfig
from .exceptions import LinkProviderError, MissingPropertyError, ValidationError
from .properties import is_unknown


def _require(props: Mapping[str, Any], key: str) -> Any:
    value = props.get(key)
    if value is None:
        raise MissingPropertyError(f"{key} is required", missing_keys=[key])
    if is_unknown(value):
        raise ValidationError(
            f"{key} is not known yet", error_code="UNKNOWN_VALUE", context={"field": key}
        )
    return value


def _string(props: Mapping[str, Any], key: str, required: bool = True) -> Optional[str]:
    if not required and props.get(key) is None:
        return None
    value = _require(props, key)
    if not isinstance(value, str) or not value:
        raise ValidationError(
            f"{key} must be a non-empty string",
            error_code="INVALID_PROPERTY",
            context={"field": key, "observed_type": type(value).__name__},
        )
    return value


@dataclass
class LinkInputs:
    """Validated desired state of a link, ready for Create."""

    source_kubeconfig: bytes
    destination_kubeconfig: bytes
    cluster_name: str
    control_plane_version: Optional[str] = None
    secret_keys: Set[str] = field(default_factory=set)

    @classmethod
    def from_properties(
        cls, props: Mapping[str, Any], secret_keys: Optional[Set[str]] = None
    ) -> "LinkInputs":
        """
        Raises:
            ValidationError: For missing or malformed fields
            NormalizationError: If a kubeconfig cannot be parsed
        """
        return cls(
            source_kubeconfig=normalize_kubeconfig(
                _require(props, FROM_CLUSTER_KUBECONFIG), FROM_CLUSTER_KUBECONFIG
            ),
            destination_kubeconfig=normalize_kubeconfig(
                _require(props, TO_CLUSTER_KUBECONFIG), TO_CLUSTER_KUBECONFIG
            ),
            cluster_name=_string(props, FROM_CLUSTER_NAME),
            control_plane_version=_string(
                props, CONTROL_PLANE_IMAGE_VERSION, required=False
            ),
            secret_keys=set(secret_keys or ()),
        )

    def outputs(self, manifest: str) -> Dict[str, Any]:
        """Recorded state after a successful Create."""
        return {
            FROM_CLUSTER_KUBECONFIG: self.source_kubeconfig.decode("utf-8"),
            TO_CLUSTER_KUBECONFIG: self.destination_kubeconfig.decode("utf-8"),
            FROM_CLUSTER_NAME: self.cluster_name,
            CONTROL_PLANE_IMAGE_VERSION: self.control_plane_version,
            CONFIG_GROUP_YAML: manifest,
        }

    def output_secret_keys(self) -> Set[str]:
        """The manifest is always secret; credentials keep their input secretness."""
        return {CONFIG_GROUP_YAML} | (self.secret_keys & set(CREDENTIAL_FIELDS))


@dataclass
class LinkState:
    """Recorded state of an existing link, as needed for teardown."""

    destination_kubeconfig: bytes
    cluster_name: str
    manifest: Optional[str] = None

    @classmethod
    def from_properties(cls, props: Mapping[str, Any]) -> "LinkState":
        manifest = props.get(CONFIG_GROUP_YAML)
        if manifest is not None and not isinstance(manifest, str):
            raise ValidationError(
                f"{CONFIG_GROUP_YAML} must be a string",
                error_code="INVALID_PROPERTY",
                context={"field": CONFIG_GROUP_YAML},
            )
        return cls(
            destination_kubeconfig=normalize_kubeconfig(
                _require(props, TO_CLUSTER_KUBECONFIG), TO_CLUSTER_KUBECONFIG
            ),
            cluster_name=_string(props, FROM_CLUSTER_NAME),
            manifest=manifest or None,
        )


def check_inputs(props: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Field-level validation of declared inputs, without running anything.

    Returns:
        A list of ``{"property", "reason"}`` failures, empty when valid.
    """
    failures: List[Dict[str, str]] = []

    def fail(key: str, reason: str) -> None:
        failures.append({"property": key, "reason": reason})

    if CONFIG_GROUP_YAML in props:
        fail(CONFIG_GROUP_YAML, f"{CONFIG_GROUP_YAML} is an output and cannot be set")

    for key in CREDENTIAL_FIELDS:
        value = props.get(key)
        if value is None:
            fail(key, f"{key} is required")
        elif not is_unknown(value):
            try:
                normalize_kubeconfig(value, key)
            except LinkProviderError as e:
                fail(key, e.message)

    for key, required in ((FROM_CLUSTER_NAME, True), (CONTROL_PLANE_IMAGE_VERSION, False)):
        value = props.get(key)
        if value is None:
            if required:
                fail(key, f"{key} is required")
        elif not is_unknown(value) and (not isinstance(value, str) or not value):
            fail(key, f"{key} must be a non-empty string")

    return failures


__all__ = ["LinkInputs", "LinkState", "check_inputs"]

"""Property diffing for the Link resource.

Credential fields are compared on their canonical bytes rather than on the
literal value, so a kubeconfig that was re-encoded (string vs. structure,
whitespace, key order) does not register as a change. The recorded manifest
is an output and never part of desired state.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .constants import CREDENTIAL_FIELDS, OUTPUT_ONLY_FIELDS
from .credentials import normalize_optional_kubeconfig
from .exceptions import NormalizationError
from .properties import is_unknown

logger = logging.getLogger(__name__)


class DiffChanges(str, Enum):
    """Overall verdict of a diff."""

    NONE = "DIFF_NONE"
    SOME = "DIFF_SOME"


class PropertyDiffKind(str, Enum):
    """Kind of change for a single property."""

    ADD = "ADD"
    DELETE = "DELETE"
    UPDATE = "UPDATE"


@dataclass
class DiffResult:
    changes: DiffChanges
    detailed_diff: Dict[str, PropertyDiffKind] = field(default_factory=dict)

    @property
    def has_detailed_diff(self) -> bool:
        return self.changes is DiffChanges.SOME


def _normalize_side(props: Mapping[str, Any], key: str, side: str) -> Optional[bytes]:
    value = props.get(key)
    if is_unknown(value):
        return None
    try:
        return normalize_optional_kubeconfig(value, key)
    except NormalizationError as e:
        raise NormalizationError(
            f"{side} {key} is invalid: {e.message}", field=key, cause=e
        ) from e


def _credentials_equal(olds: Mapping[str, Any], news: Mapping[str, Any], key: str) -> bool:
    # Unknown values (during preview) can never be proven equal.
    if is_unknown(olds.get(key)) or is_unknown(news.get(key)):
        return False
    old_bytes = _normalize_side(olds, key, "old")
    new_bytes = _normalize_side(news, key, "new")
    return old_bytes == new_bytes


def diff_properties(olds: Mapping[str, Any], news: Mapping[str, Any]) -> DiffResult:
    """Compute the changes between recorded and declared properties.

    Args:
        olds: Previously recorded (output) properties, secrets already unwrapped
        news: Newly declared input properties, secrets already unwrapped

    Returns:
        DiffResult with DiffChanges.NONE when nothing relevant changed.

    Raises:
        NormalizationError: If a credential on either side cannot be normalized
    """
    old_view = {k: v for k, v in olds.items() if k not in OUTPUT_ONLY_FIELDS and v is not None}
    new_view = {k: v for k, v in news.items() if k not in OUTPUT_ONLY_FIELDS and v is not None}

    detailed: Dict[str, PropertyDiffKind] = {}
    for key in CREDENTIAL_FIELDS:
        in_old, in_new = key in old_view, key in new_view
        equal = _credentials_equal(old_view, new_view, key)
        old_view.pop(key, None)
        new_view.pop(key, None)
        if equal:
            continue
        if in_new and not in_old:
            detailed[key] = PropertyDiffKind.ADD
        elif in_old and not in_new:
            detailed[key] = PropertyDiffKind.DELETE
        else:
            detailed[key] = PropertyDiffKind.UPDATE

    for key in new_view:
        if key not in old_view:
            detailed[key] = PropertyDiffKind.ADD
        elif old_view[key] != new_view[key]:
            detailed[key] = PropertyDiffKind.UPDATE
    for key in old_view:
        if key not in new_view:
            detailed[key] = PropertyDiffKind.DELETE

    if not detailed:
        return DiffResult(changes=DiffChanges.NONE)

    logger.debug(f"Detected changes in {sorted(detailed)}")
    return DiffResult(changes=DiffChanges.SOME, detailed_diff=detailed)


__all__ = ["DiffChanges", "DiffResult", "PropertyDiffKind", "diff_properties"]

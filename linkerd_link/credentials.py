"""Kubeconfig normalization and scoped credential files.

A kubeconfig can reach the provider either as a serialized string (JSON or
YAML) or as a structure. Both are reduced to one canonical byte sequence so
that equal configurations compare equal no matter how they were encoded, and
so that the same bytes are written for the external tools.

Public API:
    normalize_kubeconfig: Canonical bytes for a kubeconfig value
    normalize_optional_kubeconfig: Same, but None for an absent value
    kubeconfig_file: Context manager yielding a temporary file with the bytes
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

import yaml

from .exceptions import InvalidCredentialFormatError, NormalizationError

logger = logging.getLogger(__name__)


def _canonical_json(value: Mapping[str, Any], field: str) -> bytes:
    try:
        return json.dumps(
            value, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise NormalizationError(
            f"could not marshal {field}: {e}", field=field, cause=e
        ) from e


def _parse_serialized(raw: str, field: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        pass
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise NormalizationError(
            f"{field} is not valid JSON or YAML: {e}", field=field, cause=e
        ) from e


def normalize_kubeconfig(value: Any, field: str) -> bytes:
    """Return the canonical bytes of a kubeconfig.

    Args:
        value: A serialized kubeconfig string or a kubeconfig structure
        field: Property name, used in error messages

    Raises:
        InvalidCredentialFormatError: If value is neither a string nor a mapping
        NormalizationError: If the content cannot be parsed or serialized
    """
    if isinstance(value, str):
        parsed = _parse_serialized(value, field)
        if not isinstance(parsed, Mapping):
            raise NormalizationError(
                f"{field} must hold a kubeconfig object, "
                f"got {type(parsed).__name__}",
                field=field,
            )
        return _canonical_json(parsed, field)
    if isinstance(value, Mapping):
        return _canonical_json(value, field)
    raise InvalidCredentialFormatError(
        f"{field} must be either a structure or a string, "
        f"got: {type(value).__name__}",
        field=field,
        observed_type=type(value).__name__,
    )


def normalize_optional_kubeconfig(value: Any, field: str) -> Optional[bytes]:
    if value is None:
        return None
    return normalize_kubeconfig(value, field)


@contextmanager
def kubeconfig_file(contents: bytes) -> Iterator[Path]:
    """Write ``contents`` to a private temporary file for the caller's scope.

    The file is removed when the block exits, whether it finishes normally,
    raises, or is cancelled.
    """
    f = tempfile.NamedTemporaryFile(prefix="kubeconfig", delete=False)
    path = Path(f.name)
    try:
        with f:
            os.chmod(f.name, 0o600)
            f.write(contents)
        logger.debug(f"Wrote temporary kubeconfig {path}")
        yield path
    finally:
        with suppress(FileNotFoundError):
            os.remove(path)
        logger.debug(f"Removed temporary kubeconfig {path}")


__all__ = [
    "kubeconfig_file",
    "normalize_kubeconfig",
    "normalize_optional_kubeconfig",
]

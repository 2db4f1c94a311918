"""Lifecycle provider for linkerd multicluster links between two clusters."""

from .constants import RESOURCE_TYPE
from .provider import LinkProvider
from .version import __version__

__all__ = ["LinkProvider", "RESOURCE_TYPE", "__version__"]

"""Provider configuration."""

from .loader import ConfigLoader, load_config
from .models import (
    ApplierConfig,
    GeneratorConfig,
    LogFormat,
    ProviderConfig,
    ServerConfig,
)

__all__ = [
    "ApplierConfig",
    "ConfigLoader",
    "GeneratorConfig",
    "LogFormat",
    "ProviderConfig",
    "ServerConfig",
    "load_config",
]

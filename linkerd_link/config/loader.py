"""
Provider configuration loading.

Sources, later ones winning:
defaults < YAML file < LINKERD_LINK_* environment < command-line options
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import ProviderConfig


class ConfigLoader:
    """
    Builds a ProviderConfig from the file, the environment and CLI options.

    Environment keys are the config path upper-cased under ``ENV_PREFIX``,
    with ``__`` between nesting levels, e.g. ``LINKERD_LINK_SERVER__PORT``.
    """

    DEFAULT_CONFIG_FILE = Path.home() / ".config" / "linkerd-link" / "config.yaml"
    CONFIG_PATH_ENV = "LINKERD_LINK_CONFIG_PATH"
    ENV_PREFIX = "LINKERD_LINK_"
    # Variables under the prefix that are read elsewhere, not config keys.
    RESERVED_ENV = (CONFIG_PATH_ENV, "LINKERD_LINK_TIMEOUT_")

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.default_config_path()

    @classmethod
    def default_config_path(cls) -> Path:
        override = os.environ.get(cls.CONFIG_PATH_ENV)
        return Path(override).expanduser() if override else cls.DEFAULT_CONFIG_FILE

    def load(self) -> ProviderConfig:
        """
        Read the file (when present) and the environment into one config.

        Raises:
            ConfigError: If a source is unreadable or the result is invalid
        """
        try:
            merged: Dict[str, Any] = {}
            if self.config_path.exists():
                merged = self._deep_merge(merged, self._load_file(self.config_path))
            merged = self._deep_merge(merged, self._load_from_env())
            return ProviderConfig.model_validate(merged)
        except ConfigError:
            raise
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e}") from e
        except Exception as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

    def _load_file(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _load_from_env(self) -> Dict[str, Any]:
        """Collect ``LINKERD_LINK_*`` variables into a nested dict."""
        found: Dict[str, Any] = {}
        for name, raw in os.environ.items():
            if not name.startswith(self.ENV_PREFIX) or name.startswith(self.RESERVED_ENV):
                continue
            *parents, leaf = name[len(self.ENV_PREFIX) :].lower().split("__")
            node = found
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = self._convert_env_value(raw)
        return found

    def _convert_env_value(self, value: str) -> Any:
        """Interpret yes/no/true/false as bool and digits as int; else keep the string."""
        lowered = value.lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False
        try:
            return int(value)
        except ValueError:
            return value

    def _deep_merge(
        self, base: Mapping[str, Any], update: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Recursive merge of ``update`` over ``base``; neither input is modified."""
        merged = dict(base)
        for key, value in update.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(current, value)
            else:
                merged[key] = value
        return merged

    def merge_cli_args(
        self, config: ProviderConfig, cli_args: Mapping[str, Any]
    ) -> ProviderConfig:
        """
        Apply command-line options on top of ``config``.

        Options left as None are ignored, so unset flags keep the
        file/environment value. ``config`` itself is returned when nothing is
        overridden.
        """
        overrides = self._filter_none_values(cli_args)
        if not overrides:
            return config
        try:
            return ProviderConfig.model_validate(
                self._deep_merge(config.model_dump(), overrides)
            )
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e}") from e

    def _filter_none_values(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        kept: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict):
                value = self._filter_none_values(value) or None
            if value is not None:
                kept[key] = value
        return kept


def load_config(config_path: Optional[Path] = None) -> ProviderConfig:
    return ConfigLoader(config_path).load()

"""
Configuration models for the linkerd-link provider.

Provides type-safe configuration using pydantic with validation,
defaults, and schema enforcement.
"""

import shlex
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DEFAULT_APPLIER_COMMAND, DEFAULT_GENERATOR_COMMAND


class LogFormat(str, Enum):
    """Renderer used for structured log output."""

    JSON = "json"
    CONSOLE = "console"


def _split_command(value: Union[str, List[str]]) -> List[str]:
    if isinstance(value, str):
        value = shlex.split(value)
    if not value:
        raise ValueError("Command must contain at least one argument")
    return list(value)


class GeneratorConfig(BaseModel):
    """Configuration for the manifest generator (stage A)."""

    command: List[str] = Field(
        default_factory=lambda: list(DEFAULT_GENERATOR_COMMAND),
        description="Executable and leading arguments of the manifest generator",
    )
    isolate: bool = Field(
        default=False,
        description=(
            "Run the generator through a child invocation of this provider "
            "so that its standard output can be captured"
        ),
    )
    default_control_plane_version: Optional[str] = Field(
        default=None,
        description="Control plane version used when a resource does not set one",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("command", mode="before")
    @classmethod
    def validate_command(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a shell-style string as well as a list."""
        return _split_command(v)


class ApplierConfig(BaseModel):
    """Configuration for the manifest applier (stage B)."""

    command: List[str] = Field(
        default_factory=lambda: list(DEFAULT_APPLIER_COMMAND),
        description="Executable and leading arguments of the manifest applier",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("command", mode="before")
    @classmethod
    def validate_command(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a shell-style string as well as a list."""
        return _split_command(v)


class ServerConfig(BaseModel):
    """Bind settings for the request/response transport adapter."""

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: Annotated[int, Field(ge=0, le=65535)] = Field(
        default=0,
        description="Bind port (0 picks an ephemeral port)",
    )

    model_config = ConfigDict(extra="forbid")


class ProviderConfig(BaseModel):
    """Root configuration model for the provider."""

    generator: GeneratorConfig = Field(
        default_factory=GeneratorConfig,
        description="Manifest generator settings",
    )
    applier: ApplierConfig = Field(
        default_factory=ApplierConfig,
        description="Manifest applier settings",
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Transport adapter settings",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(
        default=LogFormat.JSON, description="Structured log renderer"
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and upper-case the log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

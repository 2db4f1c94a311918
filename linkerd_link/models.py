"""
Request and response envelopes of the resource RPC verbs.

Property maps inside the envelopes are kept in their wire form (secret
envelopes, unknown sentinels); the provider decodes them with
``linkerd_link.properties``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .diff import DiffChanges, PropertyDiffKind


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CheckRequest(_Envelope):
    urn: str
    olds: Dict[str, Any] = Field(default_factory=dict)
    news: Dict[str, Any] = Field(default_factory=dict)


class CheckFailure(_Envelope):
    property: str
    reason: str


class CheckResponse(_Envelope):
    inputs: Dict[str, Any] = Field(default_factory=dict)
    failures: List[CheckFailure] = Field(default_factory=list)


class DiffRequest(_Envelope):
    urn: str
    id: str = ""
    olds: Dict[str, Any] = Field(default_factory=dict)
    news: Dict[str, Any] = Field(default_factory=dict)


class DiffResponse(_Envelope):
    changes: DiffChanges = DiffChanges.NONE
    detailed_diff: Dict[str, PropertyDiffKind] = Field(default_factory=dict)
    has_detailed_diff: bool = False


class CreateRequest(_Envelope):
    urn: str
    properties: Dict[str, Any] = Field(default_factory=dict)


class CreateResponse(_Envelope):
    id: str
    properties: Dict[str, Any] = Field(default_factory=dict)


class ReadRequest(_Envelope):
    urn: str
    id: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)


class ReadResponse(_Envelope):
    id: str
    properties: Dict[str, Any] = Field(default_factory=dict)


class UpdateRequest(_Envelope):
    urn: str
    id: str = ""
    olds: Dict[str, Any] = Field(default_factory=dict)
    news: Dict[str, Any] = Field(default_factory=dict)


class UpdateResponse(_Envelope):
    properties: Dict[str, Any] = Field(default_factory=dict)


class DeleteRequest(_Envelope):
    urn: str
    id: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)


class ConfigureRequest(_Envelope):
    variables: Dict[str, str] = Field(default_factory=dict)
    args: Dict[str, Any] = Field(default_factory=dict)


class PluginInfo(_Envelope):
    version: str


class SchemaResponse(_Envelope):
    schema_: str = Field(alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class Empty(_Envelope):
    pass


class ErrorBody(_Envelope):
    code: Optional[str] = None
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)

"""Canonical Pydantic models shared across all clisync modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in ``./clisync.json``:
    :class:`Conventions` and :class:`GeneratorConfig`.

**Source model** -- produced fresh on every run by the extractor and
annotated by the chain detector, never persisted directly:
    :class:`Service`, :class:`Method`, :class:`Param`, :class:`ChainedParam`,
    :class:`Return`, :class:`StructField`, and :class:`ParsedStruct`.

**Manifest records** -- the durable registry of known methods, persisted as
TOML by :mod:`clisync.generator.manifest`:
    :class:`ManifestParam`, :class:`ManifestMethod`, and
    :class:`ManifestService`.

**Derived output** -- write-only projections for external tooling:
    :class:`ReturnShape`, :class:`RendererHint`, :class:`FlagSpec`,
    :class:`CommandSpec`, and :class:`CommandCatalog`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Configuration ---


class Conventions(BaseModel):
    """Naming conventions used to recognise the SDK's interface surface.

    The defaults match the go-scalingo SDK layout; other SDKs following the
    same ``FooService`` interface pattern only need to override the names
    that differ.
    """

    service_suffix: str = Field(
        default="Service", description="Suffix identifying service interfaces"
    )
    excluded_markers: list[str] = Field(
        default_factory=lambda: ["Preview"],
        description="Interfaces whose name contains one of these are skipped",
    )
    context_type: str = "context.Context"
    failure_type: str = "error"
    options_suffixes: list[str] = Field(default_factory=lambda: ["Opts", "Options"])
    params_suffixes: list[str] = Field(default_factory=lambda: ["Params"])
    pagination_type: str = "PaginationOpts"
    pagination_meta_type: str = "PaginationMeta"
    passthrough_types: list[str] = Field(
        default_factory=lambda: ["*http.Response", "http.Response"]
    )


DEFAULT_EXCLUDE_PATTERNS: list[str] = [
    "*_test.go",
    ".*",
    "*_mock.go",
    "mock_*.go",
    "doc.go",
]
"""Gitignore-style patterns for files that are never part of the SDK surface."""


class GeneratorConfig(BaseModel):
    """Effective configuration for one generator invocation.

    Built by :func:`~clisync.config.resolve_config` from defaults, the user
    config file, ``./clisync.json``, ``CLISYNC_*`` environment variables and
    CLI flags (in increasing order of precedence).

    Unknown keys are preserved in ``model_extra`` so that project files can
    carry settings for other tools.
    """

    model_config = ConfigDict(extra="allow")

    sdk_path: Optional[str] = Field(
        default=None, description="Directory holding the SDK's Go sources"
    )
    output_dir: str = Field(
        default="generated/commands", description="Where bindings are written"
    )
    manifest_path: str = Field(
        default="manifest.toml", description="Path of the persisted manifest"
    )
    sdk_version: str = Field(
        default="", description="SDK version tag recorded in the manifest"
    )
    exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Gitignore-style patterns of files to skip",
    )
    conventions: Conventions = Field(default_factory=Conventions)
    client_factory: Optional[str] = Field(
        default=None,
        description="'module:attribute' returning an SDK client for generated bindings",
    )


# --- Source model ---


class ChainedParam(BaseModel):
    """How to obtain a parameter's value by calling another method first.

    Example: a ``logsURL`` parameter is chained from the ``LogsURL`` method,
    which itself needs the ``app`` parameter.
    """

    method_name: str
    source_params: list[Param] = Field(default_factory=list)
    has_context: bool = Field(
        default=False, description="Whether the chained method takes a call context."
    )


class Param(BaseModel):
    """A single method parameter (the context argument is never one)."""

    name: str
    type: str
    chained_from: Optional[ChainedParam] = None


class Return(BaseModel):
    """A single declared return value."""

    type: str
    is_error: bool = False


class Method(BaseModel):
    """One method of a service interface."""

    name: str
    params: list[Param] = Field(default_factory=list)
    returns: list[Return] = Field(default_factory=list)
    has_context: bool = False
    hidden: bool = Field(
        default=False,
        description="Only invoked through chaining, never exposed as a command",
    )


class Service(BaseModel):
    """A named service interface and its methods, in declaration order."""

    name: str
    methods: list[Method] = Field(default_factory=list)


class StructField(BaseModel):
    """An exported field of a parsed struct definition."""

    name: str
    type: str
    json_tag: str = ""
    optional: bool = False


class ParsedStruct(BaseModel):
    """A struct definition, used to expand options-shaped parameters into flags."""

    name: str
    fields: list[StructField] = Field(default_factory=list)


# --- Manifest records ---


class ManifestParam(BaseModel):
    """A persisted parameter record (name may be blank for legacy entries)."""

    name: str = ""
    type: str


class ManifestMethod(BaseModel):
    """A persisted method record.

    Legacy manifests store ``params`` as a list of bare type strings; those
    are accepted and converted to :class:`ManifestParam` with a blank name
    (see :meth:`~clisync.generator.manifest.Manifest.ensure_param_names`).
    """

    name: str
    params: list[ManifestParam] = Field(default_factory=list)
    returns: str = ""
    generated: bool = False

    @field_validator("params", mode="before")
    @classmethod
    def _accept_legacy_params(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [
            {"name": "", "type": item} if isinstance(item, str) else item
            for item in value
        ]


class ManifestService(BaseModel):
    """Ordered, append-only list of the known methods of one service."""

    methods: list[ManifestMethod] = Field(default_factory=list)


# --- Derived output ---


class ReturnShape(str, enum.Enum):
    """Classification of a primary return type, chosen before any generation."""

    COLLECTION = "collection"
    COMPOSITE = "composite"
    PASSTHROUGH = "passthrough"
    NONE = "none"


class RendererHint(str, enum.Enum):
    """How a generated command displays its result."""

    TABLE = "table"
    DETAIL = "detail"
    PASSTHROUGH = "passthrough"
    SUCCESS = "success"


class FlagSpec(BaseModel):
    """One CLI flag of a generated binding.

    ``target`` names the method parameter the flag feeds; ``field`` is the
    serialisation key inside that parameter when the flag comes from an
    expanded options struct (``None`` for plain parameters).
    """

    name: str
    var: str
    type: str = "str"
    go_type: str = ""
    required: bool = False
    help: str = ""
    target: str = ""
    field: Optional[str] = None


class CommandSpec(BaseModel):
    """A flattened, write-only description of one generated command."""

    service: str
    method: str
    use: str
    flags: list[str] = Field(default_factory=list)
    returns: str = ""
    renderer: RendererHint = RendererHint.SUCCESS


class CommandCatalog(BaseModel):
    """The versioned command catalog written to ``spec.toml``."""

    version: int = 1
    sdk_version: str = ""
    commands: dict[str, CommandSpec] = Field(default_factory=dict)


ChainedParam.model_rebuild()

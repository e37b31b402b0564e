"""Data models for tool capabilities, toolset configuration and tool results.

Tool definitions are immutable pydantic models; their ``input_schema`` is a
pydantic model class that both renders the advertised JSON Schema and
validates incoming arguments.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gitmcp import __version__
from gitmcp.server.errors import ErrorKind, SchemaError

# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """Plain text content block."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Inline base64 image content block."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["image"] = "image"
    data: str
    mime_type: str = Field(..., alias="mimeType")


ContentBlock = Union[TextContent, ImageContent]

ToolHandler = Callable[[Any], Any]


# ---------------------------------------------------------------------------
# Tool definitions and capabilities
# ---------------------------------------------------------------------------


class ToolAnnotations(BaseModel):
    """Behavioral hints advertised with a tool.

    Defaults follow MCP: a tool without hints is assumed to be destructive,
    non-idempotent and open-world.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str | None = None
    read_only_hint: bool = Field(default=False, alias="readOnlyHint")
    destructive_hint: bool = Field(default=True, alias="destructiveHint")
    idempotent_hint: bool = Field(default=False, alias="idempotentHint")
    open_world_hint: bool = Field(default=True, alias="openWorldHint")


class ToolDefinition(BaseModel):
    """Immutable description of one capability."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: type[BaseModel] = Field(..., alias="inputSchema")
    annotations: ToolAnnotations = Field(default_factory=ToolAnnotations)

    @model_validator(mode="before")
    @classmethod
    def _check_structure(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise SchemaError("tool name must be a non-empty string")
        schema = data.get("input_schema", data.get("inputSchema"))
        if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
            raise SchemaError("input schema must be a pydantic model class", tool_name=name)
        try:
            json_schema = schema.model_json_schema(by_alias=True)
        except Exception as exc:
            raise SchemaError(f"input schema cannot be rendered: {exc}", tool_name=name) from exc
        if json_schema.get("type") != "object":
            raise SchemaError("input schema must describe an object", tool_name=name)
        return data

    @property
    def closed(self) -> bool:
        """Whether unknown argument fields are rejected."""
        return self.input_schema.model_config.get("extra") == "forbid"

    def json_schema(self) -> dict[str, Any]:
        """Return the JSON Schema advertised for the tool's input."""
        return self.input_schema.model_json_schema(by_alias=True)

    def to_summary(self) -> dict[str, Any]:
        """Render the ``tools/list`` wire form."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.json_schema(),
            "annotations": self.annotations.model_dump(by_alias=True, exclude_none=True),
        }


class ToolCapability(BaseModel):
    """A tool definition bound to its invocation handler."""

    model_config = ConfigDict(frozen=True)

    definition: ToolDefinition
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.definition.name


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ToolsetMode(str, Enum):
    """Coarse policy gating tool visibility by destructiveness."""

    READ_ONLY = "readOnly"
    ALL = "all"


class ToolsetConfig(BaseModel):
    """Which tools are exposed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mode: ToolsetMode = Field(default=ToolsetMode.READ_ONLY)
    available_tools: list[str] = Field(
        default_factory=list,
        alias="availableTools",
        description="Allow-list of tool names. Empty means no extra restriction.",
    )


class DynamicDiscoveryConfig(BaseModel):
    """Whether clients are told when the tool list changes."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False


DEFAULT_INSTRUCTIONS = (
    "Call get_git_repos_from_path first to find the repositories enclosing a "
    "directory, then pass one of the returned repository paths to the other "
    "git tools."
)


class ServerConfig(BaseModel):
    """Top-level server configuration, built once at startup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = "git-tools-server"
    version: str = __version__
    instructions: str | None = DEFAULT_INSTRUCTIONS
    toolset: ToolsetConfig = Field(default_factory=ToolsetConfig, alias="toolsetConfig")
    dynamic_tool_discovery: DynamicDiscoveryConfig = Field(
        default_factory=DynamicDiscoveryConfig,
        alias="dynamicToolDiscovery",
    )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ErrorInfo(BaseModel):
    """Structured error attached to a failed tool call."""

    kind: ErrorKind
    message: str


class ListToolsResult(BaseModel):
    """Result of ``tools/list``."""

    tools: list[ToolDefinition] = []
    instructions: str | None = None

    def to_wire(self) -> dict[str, Any]:
        result: dict[str, Any] = {"tools": [t.to_summary() for t in self.tools]}
        if self.instructions:
            result["instructions"] = self.instructions
        return result


class CallToolResult(BaseModel):
    """Result of ``tools/call``; ``is_error`` marks a handler failure."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[ContentBlock] = []
    is_error: bool = Field(default=False, alias="isError")
    error: ErrorInfo | None = None

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextContent))

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

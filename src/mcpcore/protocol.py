"""MCP protocol types.

Message shapes for initialize and the tools/resources/prompts families.
Models use extra="ignore" for forward compatibility with future protocol
fields; dump them with ``model_dump(by_alias=True, exclude_none=True)`` to
get the camelCase wire form.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from mcpcore.models.base import MCPBaseModel

# Protocol versions this implementation speaks, oldest first
SUPPORTED_PROTOCOL_VERSIONS: tuple[str, ...] = ("2024-11-05", "2025-03-26", "2025-06-18")

# Version announced when the client asks for one we do not support
MCP_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[-1]

DEFAULT_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {},
    "additionalProperties": True,
}

DEFAULT_MIME_TYPE = "text/plain"

# Maximum number of values returned by completion/complete
MAX_COMPLETION_VALUES = 100


def is_supported_protocol_version(version: str | None) -> bool:
    return version in SUPPORTED_PROTOCOL_VERSIONS


# --- Implementation (clientInfo / serverInfo) ---


class Implementation(MCPBaseModel):
    """MCP implementation info (client or server)."""

    name: str = Field(description="Programmatic name")
    version: str = Field(description="Version string")
    title: str | None = Field(default=None, description="Human-readable title")
    description: str | None = Field(default=None)


# --- Initialize ---


class InitializeRequestParams(MCPBaseModel):
    """Params for initialize request."""

    protocol_version: str | None = Field(default=None, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    client_info: Implementation | None = Field(default=None, alias="clientInfo")

    @field_validator("capabilities", mode="before")
    @classmethod
    def null_capabilities(cls, v: Any) -> Any:
        """A null capability map counts as an empty one."""
        return {} if v is None else v


class InitializeResult(MCPBaseModel):
    """Result of initialize (server response)."""

    protocol_version: str = Field(alias="protocolVersion", default=MCP_PROTOCOL_VERSION)
    capabilities: dict[str, Any] = Field(default_factory=dict)
    server_info: Implementation = Field(alias="serverInfo")
    instructions: str | None = Field(default=None)


# --- Content ---


class TextContent(MCPBaseModel):
    """Text content block."""

    type: Literal["text"] = Field(default="text")
    text: str = Field(description="Text content")


class ResourceContent(MCPBaseModel):
    """Embedded resource content block."""

    type: Literal["resource"] = Field(default="resource")
    resource: Any = Field(description="Embedded resource payload")


# --- Definitions (list items) ---


class ToolDefinition(MCPBaseModel):
    """tools/list item."""

    name: str = Field(description="Unique tool name")
    description: str = Field(description="Human-readable description")
    input_schema: dict[str, Any] = Field(
        alias="inputSchema",
        description="JSON Schema for parameters",
    )


class ResourceDefinition(MCPBaseModel):
    """resources/list item; component metadata is merged in after dumping."""

    uri: str
    name: str
    description: str
    mime_type: str = Field(alias="mimeType", default=DEFAULT_MIME_TYPE)


class ResourceTemplateDefinition(MCPBaseModel):
    """resources/templates/list item."""

    uri_template: str = Field(alias="uriTemplate")
    name: str
    description: str
    mime_type: str = Field(alias="mimeType", default=DEFAULT_MIME_TYPE)


class PromptDefinition(MCPBaseModel):
    """prompts/list item."""

    name: str
    description: str
    arguments: list[Any] = Field(default_factory=list)


# --- Results ---


class CallToolResult(MCPBaseModel):
    """Result of tools/call (content + isError)."""

    content: list[dict[str, Any]] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")


class CompletionValues(MCPBaseModel):
    values: list[str] = Field(default_factory=list)
    total: int = 0
    has_more: bool = Field(default=False, alias="hasMore")


class CompleteResult(MCPBaseModel):
    """Result of completion/complete."""

    completion: CompletionValues


class CompletionReference(MCPBaseModel):
    """``ref`` param of completion/complete."""

    type: Literal["ref/prompt", "ref/resource"]
    name: str | None = None
    uri: str | None = None


class CompletionArgument(MCPBaseModel):
    """``argument`` param of completion/complete."""

    name: str
    value: str

"""Base Pydantic model configuration for mcpcore models.

Wire models inherit from MCPBaseModel so that every message type behaves the
same way:
- Flexible field naming (populate_by_name=True) so camelCase wire aliases and
  snake_case attribute names are both accepted
- Unknown fields are ignored for forward compatibility with newer MCP revisions
- Default values are validated
"""

from pydantic import BaseModel, ConfigDict


class MCPBaseModel(BaseModel):
    """Base model for all mcpcore wire entities.

    Example:
        >>> from pydantic import Field
        >>> class Page(MCPBaseModel):
        ...     next_cursor: str | None = Field(default=None, alias="nextCursor")
        >>> Page(nextCursor="abc").model_dump(by_alias=True)
        {'nextCursor': 'abc'}
    """

    model_config = ConfigDict(
        # Accept both the field name and its alias
        populate_by_name=True,
        # Newer protocol revisions may add fields
        extra="ignore",
        validate_default=True,
    )


class FrozenModel(MCPBaseModel):
    """Immutable variant used for configuration and value objects."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        validate_default=True,
        frozen=True,
    )

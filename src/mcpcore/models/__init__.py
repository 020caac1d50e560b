"""Shared Pydantic model bases for mcpcore."""

from mcpcore.models.base import FrozenModel, MCPBaseModel

__all__ = ["FrozenModel", "MCPBaseModel"]

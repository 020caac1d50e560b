"""MCP component handlers: one per method family."""

from mcpcore.handlers.base import BaseHandler
from mcpcore.handlers.prompts import PromptHandler
from mcpcore.handlers.resources import ResourceHandler
from mcpcore.handlers.tools import ToolHandler

__all__ = [
    "BaseHandler",
    "PromptHandler",
    "ResourceHandler",
    "ToolHandler",
]
